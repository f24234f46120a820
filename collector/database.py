# -*- coding: utf-8 -*-
"""
托管数据库采集器

功能：
- 调用 GET /v2/databases
- 暴露集群状态、节点数和存储容量
"""

from collector.base import MetricDescriptor, ResourceCollector, flag, label, slug, to_float

LABELS = ('id', 'name', 'region', 'engine')

MIB = 1024 * 1024


class DatabaseCollector(ResourceCollector):
    """托管数据库采集器"""

    name = 'database'

    status = MetricDescriptor(
        'digitalocean_database_status',
        "The status of the database cluster, 1 if online, 0 otherwise",
        LABELS,
    )
    nodes = MetricDescriptor(
        'digitalocean_database_nodes',
        "The number of nodes in the database cluster",
        LABELS,
    )
    storage_size = MetricDescriptor(
        'digitalocean_database_storage_size_bytes',
        "The disk space allocated to the database cluster in bytes",
        LABELS,
    )

    descriptors = (status, nodes, storage_size)

    def collect(self):
        databases = self._fetch('databases', self.client.list_databases)
        if databases is None:
            return

        status = self.status.family()
        nodes = self.nodes.family()
        storage_size = self.storage_size.family()

        for db in databases:
            labels = [
                label(db.get('id')),
                label(db.get('name')),
                slug(db.get('region')),
                label(db.get('engine')),
            ]
            status.add_metric(labels, flag(db.get('status') == 'online'))
            nodes.add_metric(labels, to_float(db.get('num_nodes')))
            storage_size.add_metric(labels, to_float(db.get('storage_size_mib')) * MIB)

        yield status
        yield nodes
        yield storage_size
