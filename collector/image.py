# -*- coding: utf-8 -*-
"""
镜像采集器

功能：
- 调用 GET /v2/images?private=true（只采集用户自己的镜像）
"""

from collector.base import MetricDescriptor, ResourceCollector, label, to_float

LABELS = ('id', 'name', 'regions', 'type', 'distribution')

GIB = 1024 * 1024 * 1024


class ImageCollector(ResourceCollector):
    """镜像采集器"""

    name = 'image'

    min_disk_size = MetricDescriptor(
        'digitalocean_image_min_disk_size_bytes',
        "The minimum disk size in bytes required for a droplet to use this image",
        LABELS,
    )
    size = MetricDescriptor(
        'digitalocean_image_size_bytes',
        "The size of the image in bytes",
        LABELS,
    )

    descriptors = (min_disk_size, size)

    def collect(self):
        images = self._fetch('images', self.client.list_images)
        if images is None:
            return

        min_disk_size = self.min_disk_size.family()
        size = self.size.family()

        for image in images:
            labels = [
                label(image.get('id')),
                label(image.get('name')),
                ','.join(sorted(image.get('regions') or [])),
                label(image.get('type')),
                label(image.get('distribution')),
            ]
            min_disk_size.add_metric(labels, to_float(image.get('min_disk_size')) * GIB)
            size.add_metric(labels, to_float(image.get('size_gigabytes')) * GIB)

        yield min_disk_size
        yield size
