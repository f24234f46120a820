# tests/helpers.py

from prometheus_client import CollectorRegistry


def samples(registry, name):
    """All samples with the given name from a single scrape."""
    return [s for family in registry.collect() for s in family.samples if s.name == name]


def family_names(registry):
    """Names of the metric families produced by a single scrape."""
    return {family.name for family in registry.collect()}


def error_count(errors, collector):
    """
    Current value of the shared error counter for one collector.

    The counter is read through a registry of its own so that reading it does
    not trigger another scrape of the collectors.
    """
    registry = CollectorRegistry()
    registry.register(errors)
    return registry.get_sample_value("digitalocean_errors_total", {"collector": collector})
