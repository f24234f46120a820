# -*- coding: utf-8 -*-
"""
块存储卷采集器

功能：
- 调用 GET /v2/volumes（自动翻页）
"""

from collector.base import MetricDescriptor, ResourceCollector, label, slug, to_float

GIB = 1024 * 1024 * 1024


class VolumeCollector(ResourceCollector):
    """块存储卷采集器"""

    name = 'volume'

    size = MetricDescriptor(
        'digitalocean_volume_size_bytes',
        "Volume's size in bytes",
        ('id', 'name', 'region'),
    )

    descriptors = (size,)

    def collect(self):
        volumes = self._fetch('volumes', self.client.list_volumes)
        if volumes is None:
            return

        size = self.size.family()
        for volume in volumes:
            size.add_metric(
                [label(volume.get('id')), label(volume.get('name')), slug(volume.get('region'))],
                to_float(volume.get('size_gigabytes')) * GIB,
            )
        yield size
