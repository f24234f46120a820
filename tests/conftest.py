# tests/conftest.py

import logging
from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from api.digitalocean.client import DigitalOceanClient
from collector.registry import new_error_counter


@pytest.fixture
def errors():
    """A fresh error counter, not registered anywhere."""
    return new_error_counter()


@pytest.fixture
def logger():
    return logging.getLogger("tests.collector")


@pytest.fixture
def do_client():
    """
    A mocked DigitalOcean client. Every list/get method returns an empty
    result unless a test overrides it.
    """
    client = MagicMock(spec=DigitalOceanClient)
    client.get_account.return_value = {}
    client.get_balance.return_value = {}
    for method in (
        "list_apps",
        "list_databases",
        "list_domains",
        "list_domain_records",
        "list_droplets",
        "list_floating_ips",
        "list_images",
        "list_keys",
        "list_load_balancers",
        "list_snapshots",
        "list_volumes",
        "list_kubernetes_clusters",
    ):
        getattr(client, method).return_value = []
    return client


@pytest.fixture
def make_registry(errors):
    """
    Returns a function that registers the given collectors, plus the error
    counter, on an isolated CollectorRegistry.
    """

    def _make(*collectors):
        registry = CollectorRegistry()
        registry.register(errors)
        for collector in collectors:
            registry.register(collector)
        return registry

    return _make

