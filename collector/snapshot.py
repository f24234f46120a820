# -*- coding: utf-8 -*-
"""
快照采集器

功能：
- 调用 GET /v2/snapshots（自动翻页，包含 Droplet 和 Volume 快照）
"""

from collector.base import MetricDescriptor, ResourceCollector, label, to_float

LABELS = ('id', 'name', 'regions', 'resource_type')

GIB = 1024 * 1024 * 1024


class SnapshotCollector(ResourceCollector):
    """快照采集器"""

    name = 'snapshot'

    size = MetricDescriptor(
        'digitalocean_snapshot_size_bytes',
        "Snapshot's size in bytes",
        LABELS,
    )
    min_disk_size = MetricDescriptor(
        'digitalocean_snapshot_min_disk_size_bytes',
        "Minimum disk size for a droplet to run this snapshot on in bytes",
        LABELS,
    )

    descriptors = (size, min_disk_size)

    def collect(self):
        snapshots = self._fetch('snapshots', self.client.list_snapshots)
        if snapshots is None:
            return

        size = self.size.family()
        min_disk_size = self.min_disk_size.family()

        for snapshot in snapshots:
            labels = [
                label(snapshot.get('id')),
                label(snapshot.get('name')),
                ','.join(sorted(snapshot.get('regions') or [])),
                label(snapshot.get('resource_type')),
            ]
            size.add_metric(labels, to_float(snapshot.get('size_gigabytes')) * GIB)
            min_disk_size.add_metric(labels, to_float(snapshot.get('min_disk_size')) * GIB)

        yield size
        yield min_disk_size
