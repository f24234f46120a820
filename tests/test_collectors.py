# tests/test_collectors.py

import math
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from api.digitalocean.client import DigitalOceanAPIError, DigitalOceanTimeout
from collector.account import AccountCollector
from collector.app import AppCollector
from collector.balance import BalanceCollector
from collector.base import parse_timestamp, to_float
from collector.database import DatabaseCollector
from collector.domain import DomainCollector
from collector.droplet import DropletCollector
from collector.exporter import ExporterCollector
from collector.floating_ip import FloatingIPCollector
from collector.image import ImageCollector
from collector.incident import IncidentCollector
from collector.key import KeyCollector
from collector.kubernetes import KubernetesCollector
from collector.load_balancer import LoadBalancerCollector
from collector.snapshot import SnapshotCollector
from collector.spaces import SpacesCollector
from collector.volume import VolumeCollector

from .helpers import error_count, family_names, samples

GIB = 1024 ** 3
TIMEOUT = 5.0


class TestAccountCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.get_account.return_value = {
            "droplet_limit": 25,
            "floating_ip_limit": 3,
            "volume_limit": 100,
            "email_verified": True,
            "status": "active",
        }
        registry = make_registry(AccountCollector(logger, errors, do_client, TIMEOUT))

        assert registry.get_sample_value("digitalocean_account_active") == 1.0
        assert registry.get_sample_value("digitalocean_account_droplet_limit") == 25.0
        assert registry.get_sample_value("digitalocean_account_floating_ip_limit") == 3.0
        assert registry.get_sample_value("digitalocean_account_volume_limit") == 100.0
        assert registry.get_sample_value("digitalocean_account_verified") == 1.0
        assert error_count(errors, "account") == 0.0

    def test_locked_account(self, logger, errors, do_client, make_registry):
        do_client.get_account.return_value = {"status": "locked", "email_verified": False}
        registry = make_registry(AccountCollector(logger, errors, do_client, TIMEOUT))

        assert registry.get_sample_value("digitalocean_account_active") == 0.0
        assert registry.get_sample_value("digitalocean_account_verified") == 0.0


class TestAppCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_apps.return_value = [
            {
                "id": "app-1",
                "spec": {"name": "web"},
                "region": {"slug": "ams"},
                "active_deployment": {"phase": "ACTIVE"},
                "updated_at": "2020-11-19T20:27:18Z",
            },
            {"id": "app-2", "spec": {"name": "worker"}, "region": {"slug": "nyc"}},
        ]
        registry = make_registry(AppCollector(logger, errors, do_client, TIMEOUT))

        web = {"id": "app-1", "name": "web", "region": "ams"}
        worker = {"id": "app-2", "name": "worker", "region": "nyc"}
        assert registry.get_sample_value("digitalocean_app_active", web) == 1.0
        assert registry.get_sample_value("digitalocean_app_active", worker) == 0.0
        assert registry.get_sample_value("digitalocean_app_updated_timestamp_seconds", web) == 1605817638.0


class TestBalanceCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.get_balance.return_value = {
            "month_to_date_balance": "23.44",
            "account_balance": "12.23",
            "month_to_date_usage": "11.21",
            "generated_at": "2019-07-09T15:01:12Z",
        }
        registry = make_registry(BalanceCollector(logger, errors, do_client, TIMEOUT))

        assert registry.get_sample_value("digitalocean_balance_month_to_date") == 23.44
        assert registry.get_sample_value("digitalocean_account_balance") == 12.23
        assert registry.get_sample_value("digitalocean_month_to_date_usage") == 11.21
        assert registry.get_sample_value("digitalocean_balance_generated_at") == 1562684472.0

    def test_unparsable_amount_is_nan(self, logger, errors, do_client, make_registry):
        do_client.get_balance.return_value = {"month_to_date_balance": "n/a"}
        registry = make_registry(BalanceCollector(logger, errors, do_client, TIMEOUT))

        assert math.isnan(registry.get_sample_value("digitalocean_balance_month_to_date"))
        assert error_count(errors, "balance") == 0.0


class TestDatabaseCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_databases.return_value = [
            {
                "id": "db-1",
                "name": "backend",
                "engine": "pg",
                "region": "nyc3",
                "status": "online",
                "num_nodes": 2,
                "storage_size_mib": 61440,
            }
        ]
        registry = make_registry(DatabaseCollector(logger, errors, do_client, TIMEOUT))

        labels = {"id": "db-1", "name": "backend", "region": "nyc3", "engine": "pg"}
        assert registry.get_sample_value("digitalocean_database_status", labels) == 1.0
        assert registry.get_sample_value("digitalocean_database_nodes", labels) == 2.0
        assert registry.get_sample_value("digitalocean_database_storage_size_bytes", labels) == 61440 * 1024 * 1024

    def test_timeout_emits_nothing_and_counts_error(self, logger, errors, do_client, make_registry):
        do_client.list_databases.side_effect = DigitalOceanTimeout("context deadline exceeded")
        registry = make_registry(DatabaseCollector(logger, errors, do_client, TIMEOUT))

        assert samples(registry, "digitalocean_database_status") == []
        assert "digitalocean_database_status" not in family_names(registry)
        # two scrapes above, two failures
        assert error_count(errors, "database") == 2.0


class TestDomainCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_domains.return_value = [{"name": "example.com", "ttl": 1800}]
        do_client.list_domain_records.return_value = [
            {"id": 3, "type": "SRV", "name": "_sip._tcp", "data": "sip", "priority": 10, "port": 5060, "weight": 5},
        ]
        registry = make_registry(DomainCollector(logger, errors, do_client, TIMEOUT))

        labels = {"id": "3", "domain": "example.com", "type": "SRV", "name": "_sip._tcp", "data": "sip"}
        assert registry.get_sample_value("digitalocean_domain_ttl_seconds", {"name": "example.com"}) == 1800.0
        assert registry.get_sample_value("digitalocean_domain_record_port", labels) == 5060.0
        assert registry.get_sample_value("digitalocean_domain_record_priority", labels) == 10.0
        assert registry.get_sample_value("digitalocean_domain_record_weight", labels) == 5.0

    def test_records_failure_is_isolated_per_domain(self, logger, errors, do_client, make_registry):
        do_client.list_domains.return_value = [{"name": "a.com", "ttl": 60}, {"name": "b.com", "ttl": 60}]

        def records(domain, deadline=None):
            if domain == "a.com":
                raise DigitalOceanAPIError("GET", "/v2/domains/a.com/records", 500, "Server Error")
            return [{"id": 1, "type": "MX", "name": "@", "data": "mail", "priority": 10}]

        do_client.list_domain_records.side_effect = records
        collector = DomainCollector(logger, errors, do_client, TIMEOUT)
        registry = make_registry(collector)

        families = {f.name: f for f in collector.collect()}
        domains = {s.labels["domain"] for s in families["digitalocean_domain_record_priority"].samples}
        assert domains == {"b.com"}
        assert len(families["digitalocean_domain_ttl_seconds"].samples) == 2
        assert error_count(errors, "domain") == 1.0

    def test_domains_failure_emits_nothing(self, logger, errors, do_client, make_registry):
        do_client.list_domains.side_effect = DigitalOceanTimeout("context deadline exceeded")
        collector = DomainCollector(logger, errors, do_client, TIMEOUT)

        assert list(collector.collect()) == []
        do_client.list_domain_records.assert_not_called()


class TestDropletCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_droplets.return_value = [
            {
                "id": 3164444,
                "name": "example.com",
                "memory": 1024,
                "vcpus": 1,
                "disk": 25,
                "status": "active",
                "region": {"slug": "nyc3"},
                "size": {"price_monthly": 5.0, "price_hourly": 0.00744},
            },
            {"id": 3164445, "name": "off", "status": "off", "region": {"slug": "fra1"}, "size": {}},
        ]
        registry = make_registry(DropletCollector(logger, errors, do_client, TIMEOUT))

        labels = {"id": "3164444", "name": "example.com", "region": "nyc3"}
        assert registry.get_sample_value("digitalocean_droplet_up", labels) == 1.0
        assert registry.get_sample_value("digitalocean_droplet_cpus", labels) == 1.0
        assert registry.get_sample_value("digitalocean_droplet_memory_bytes", labels) == 1024 * 1024 * 1024
        assert registry.get_sample_value("digitalocean_droplet_disk_bytes", labels) == 25 * GIB
        assert registry.get_sample_value("digitalocean_droplet_price_monthly", labels) == 5.0
        assert registry.get_sample_value("digitalocean_droplet_price_hourly", labels) == 0.00744
        assert registry.get_sample_value(
            "digitalocean_droplet_up", {"id": "3164445", "name": "off", "region": "fra1"}
        ) == 0.0

    def test_deadline_is_passed_to_client(self, logger, errors, do_client):
        collector = DropletCollector(logger, errors, do_client, TIMEOUT)
        list(collector.collect())

        assert "deadline" in do_client.list_droplets.call_args.kwargs


class TestFloatingIPCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_floating_ips.return_value = [
            {"ip": "45.55.96.47", "region": {"slug": "nyc3"}, "droplet": {"id": 1, "name": "web"}},
            {"ip": "45.55.96.48", "region": {"slug": "nyc3"}, "droplet": None},
        ]
        registry = make_registry(FloatingIPCollector(logger, errors, do_client, TIMEOUT))

        assert registry.get_sample_value(
            "digitalocean_floating_ipv4_active",
            {"ipv4": "45.55.96.47", "region": "nyc3", "droplet_id": "1", "droplet_name": "web"},
        ) == 1.0
        assert registry.get_sample_value(
            "digitalocean_floating_ipv4_active",
            {"ipv4": "45.55.96.48", "region": "nyc3", "droplet_id": "", "droplet_name": ""},
        ) == 0.0


class TestImageCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_images.return_value = [
            {
                "id": 7555620,
                "name": "Nifty New Snapshot",
                "regions": ["nyc2", "nyc1"],
                "type": "snapshot",
                "distribution": "Ubuntu",
                "min_disk_size": 20,
                "size_gigabytes": 2.34,
            }
        ]
        registry = make_registry(ImageCollector(logger, errors, do_client, TIMEOUT))

        labels = {
            "id": "7555620",
            "name": "Nifty New Snapshot",
            "regions": "nyc1,nyc2",
            "type": "snapshot",
            "distribution": "Ubuntu",
        }
        assert registry.get_sample_value("digitalocean_image_min_disk_size_bytes", labels) == 20 * GIB
        assert registry.get_sample_value("digitalocean_image_size_bytes", labels) == pytest.approx(2.34 * GIB)


class TestKeyCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_keys.return_value = [
            {"id": 512189, "name": "My SSH Public Key", "fingerprint": "3b:16:bf:e4:8b:00:8b:b8"},
        ]
        registry = make_registry(KeyCollector(logger, errors, do_client, TIMEOUT))

        assert registry.get_sample_value(
            "digitalocean_key",
            {"id": "512189", "name": "My SSH Public Key", "fingerprint": "3b:16:bf:e4:8b:00:8b:b8"},
        ) == 1.0


class TestLoadBalancerCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_load_balancers.return_value = [
            {"id": "lb-1", "name": "example-lb-01", "ip": "104.131.186.241", "status": "active",
             "droplet_ids": [3164444, 3164445]},
        ]
        registry = make_registry(LoadBalancerCollector(logger, errors, do_client, TIMEOUT))

        labels = {"id": "lb-1", "name": "example-lb-01", "ip": "104.131.186.241"}
        assert registry.get_sample_value("digitalocean_loadbalancer_status", labels) == 1.0
        assert registry.get_sample_value("digitalocean_loadbalancer_droplets", labels) == 2.0


class TestSnapshotCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_snapshots.return_value = [
            {"id": "6372321", "name": "web-01-1595954862243", "regions": ["nyc3"],
             "resource_type": "droplet", "min_disk_size": 25, "size_gigabytes": 2.34},
        ]
        registry = make_registry(SnapshotCollector(logger, errors, do_client, TIMEOUT))

        labels = {"id": "6372321", "name": "web-01-1595954862243", "regions": "nyc3", "resource_type": "droplet"}
        assert registry.get_sample_value("digitalocean_snapshot_min_disk_size_bytes", labels) == 25 * GIB
        assert registry.get_sample_value("digitalocean_snapshot_size_bytes", labels) == pytest.approx(2.34 * GIB)


class TestVolumeCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_volumes.return_value = [
            {"id": "506f78a4", "name": "example", "region": {"slug": "nyc1"}, "size_gigabytes": 10},
        ]
        registry = make_registry(VolumeCollector(logger, errors, do_client, TIMEOUT))

        assert registry.get_sample_value(
            "digitalocean_volume_size_bytes", {"id": "506f78a4", "name": "example", "region": "nyc1"}
        ) == 10 * GIB


class TestKubernetesCollector:
    def test_collect(self, logger, errors, do_client, make_registry):
        do_client.list_kubernetes_clusters.return_value = [
            {
                "id": "bd5f5959",
                "name": "prod-cluster-01",
                "region": "nyc1",
                "version": "1.18.6-do.0",
                "status": {"state": "running"},
                "node_pools": [
                    {"id": "cdda885e", "name": "frontend-pool", "size": "s-1vcpu-2gb", "count": 3},
                ],
            }
        ]
        registry = make_registry(KubernetesCollector(logger, errors, do_client, TIMEOUT))

        assert registry.get_sample_value(
            "digitalocean_kubernetes_cluster_up",
            {"id": "bd5f5959", "name": "prod-cluster-01", "region": "nyc1", "version": "1.18.6-do.0"},
        ) == 1.0
        assert registry.get_sample_value(
            "digitalocean_kubernetes_nodepool_nodes",
            {"cluster_id": "bd5f5959", "cluster_name": "prod-cluster-01", "id": "cdda885e",
             "name": "frontend-pool", "size": "s-1vcpu-2gb"},
        ) == 3.0


class TestSpacesCollector:
    def _client(self, regions, buckets):
        client = MagicMock()
        client.regions = regions

        def list_buckets(region, deadline=None):
            result = buckets[region]
            if isinstance(result, Exception):
                raise result
            return result

        client.list_buckets.side_effect = list_buckets
        return client

    def test_region_failure_is_isolated(self, logger, errors, make_registry):
        created = datetime(2021, 1, 1, tzinfo=timezone.utc)
        client = self._client(
            ["nyc3", "ams3"],
            {
                "nyc3": [{"Name": "backups", "CreationDate": created}],
                "ams3": RuntimeError("AccessDenied"),
            },
        )
        registry = make_registry(SpacesCollector(logger, errors, client, TIMEOUT))

        labels = {"name": "backups", "region": "nyc3"}
        assert registry.get_sample_value("digitalocean_spaces_bucket", labels) == 1.0
        assert registry.get_sample_value(
            "digitalocean_spaces_bucket_created_timestamp_seconds", labels
        ) == created.timestamp()
        assert [s.labels["region"] for s in samples(registry, "digitalocean_spaces_bucket")] == ["nyc3"]

    def test_all_regions_fail(self, logger, errors):
        client = self._client(["nyc3"], {"nyc3": RuntimeError("AccessDenied")})
        collector = SpacesCollector(logger, errors, client, TIMEOUT)

        assert list(collector.collect()) == []
        assert error_count(errors, "spaces") == 1.0

    def test_regions_share_one_deadline(self, logger, errors):
        client = self._client(["nyc3", "ams3"], {"nyc3": [], "ams3": []})
        collector = SpacesCollector(logger, errors, client, TIMEOUT)

        list(collector.collect())

        deadlines = {c.kwargs["deadline"] for c in client.list_buckets.call_args_list}
        assert len(deadlines) == 1


class TestIncidentCollector:
    def test_collect(self, logger, errors, make_registry):
        client = MagicMock()
        client.list_unresolved_incidents.return_value = [
            {"id": "p31zjtct2jer", "name": "Droplet creation delays", "status": "investigating", "impact": "minor"},
        ]
        registry = make_registry(IncidentCollector(logger, errors, TIMEOUT, client=client))

        assert registry.get_sample_value("digitalocean_incidents_unresolved") == 1.0
        assert registry.get_sample_value(
            "digitalocean_incident",
            {"id": "p31zjtct2jer", "name": "Droplet creation delays", "status": "investigating", "impact": "minor"},
        ) == 1.0

    def test_status_page_unreachable(self, logger, errors, make_registry):
        client = MagicMock()
        client.list_unresolved_incidents.side_effect = DigitalOceanTimeout("context deadline exceeded")
        collector = IncidentCollector(logger, errors, TIMEOUT, client=client)

        assert list(collector.collect()) == []
        assert error_count(errors, "incident") == 1.0


class TestExporterCollector:
    def test_collect(self, make_registry):
        registry = make_registry(ExporterCollector("0.1.0", "abc123", "2024-01-01", "3.12.1", 1700000000.0))

        assert registry.get_sample_value(
            "digitalocean_exporter_build_info",
            {"version": "0.1.0", "revision": "abc123", "builddate": "2024-01-01", "pythonversion": "3.12.1"},
        ) == 1.0
        assert registry.get_sample_value("digitalocean_exporter_start_time") == 1700000000.0


class TestDescribe:
    @pytest.mark.parametrize(
        "cls",
        [
            AccountCollector, AppCollector, BalanceCollector, DatabaseCollector, DomainCollector,
            DropletCollector, FloatingIPCollector, ImageCollector, KeyCollector, LoadBalancerCollector,
            SnapshotCollector, VolumeCollector, KubernetesCollector,
        ],
    )
    def test_describe_does_not_call_api(self, cls, logger, errors):
        client = MagicMock()
        collector = cls(logger, errors, client, TIMEOUT)

        first = [f.name for f in collector.describe()]
        second = [f.name for f in collector.describe()]

        assert first == second
        assert first
        assert all(not f.samples for f in collector.describe())
        assert client.method_calls == []

    @pytest.mark.parametrize(
        "cls",
        [
            AccountCollector, AppCollector, BalanceCollector, DatabaseCollector, DomainCollector,
            DropletCollector, FloatingIPCollector, ImageCollector, KeyCollector, LoadBalancerCollector,
            SnapshotCollector, VolumeCollector, KubernetesCollector,
        ],
    )
    def test_api_error_never_escapes_collect(self, cls, logger, errors):
        client = MagicMock()
        client.configure_mock(**{
            f"{name}.side_effect": DigitalOceanAPIError("GET", "/v2", 503, "<html>" * 100)
            for name in (
                "get_account", "get_balance", "list_apps", "list_databases", "list_domains",
                "list_droplets", "list_floating_ips", "list_images", "list_keys",
                "list_load_balancers", "list_snapshots", "list_volumes", "list_kubernetes_clusters",
            )
        })
        collector = cls(logger, errors, client, TIMEOUT)

        assert list(collector.collect()) == []
        assert error_count(errors, collector.name) == 1.0


def test_parse_timestamp():
    assert parse_timestamp("2020-11-19T20:27:18Z") == 1605817638.0
    assert parse_timestamp("2020-11-19T20:27:18.123456789Z") == pytest.approx(1605817638.123456)
    assert math.isnan(parse_timestamp(None))
    assert math.isnan(parse_timestamp("yesterday"))


def test_to_float():
    assert to_float("23.44") == 23.44
    assert to_float(3) == 3.0
    assert math.isnan(to_float(None))
    assert math.isnan(to_float(""))
    assert math.isnan(to_float("abc"))
