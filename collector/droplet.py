# -*- coding: utf-8 -*-
"""
Droplet 采集器

功能：
- 调用 GET /v2/droplets（自动翻页）
- 暴露运行状态、规格和价格
"""

from collector.base import MetricDescriptor, ResourceCollector, flag, label, slug, to_float

LABELS = ('id', 'name', 'region')

MIB = 1024 * 1024
GIB = 1024 * 1024 * 1024


class DropletCollector(ResourceCollector):
    """Droplet 采集器"""

    name = 'droplet'

    up = MetricDescriptor(
        'digitalocean_droplet_up',
        "If 1 the droplet is up and running, 0 otherwise",
        LABELS,
    )
    cpus = MetricDescriptor(
        'digitalocean_droplet_cpus',
        "Droplet's number of CPUs",
        LABELS,
    )
    memory = MetricDescriptor(
        'digitalocean_droplet_memory_bytes',
        "Droplet's memory in bytes",
        LABELS,
    )
    disk = MetricDescriptor(
        'digitalocean_droplet_disk_bytes',
        "Droplet's disk in bytes",
        LABELS,
    )
    price_hourly = MetricDescriptor(
        'digitalocean_droplet_price_hourly',
        "Price of the Droplet billed hourly in dollars",
        LABELS,
    )
    price_monthly = MetricDescriptor(
        'digitalocean_droplet_price_monthly',
        "Price of the Droplet billed monthly in dollars",
        LABELS,
    )

    descriptors = (up, cpus, memory, disk, price_hourly, price_monthly)

    def collect(self):
        droplets = self._fetch('droplets', self.client.list_droplets)
        if droplets is None:
            return

        up = self.up.family()
        cpus = self.cpus.family()
        memory = self.memory.family()
        disk = self.disk.family()
        price_hourly = self.price_hourly.family()
        price_monthly = self.price_monthly.family()

        for droplet in droplets:
            labels = [label(droplet.get('id')), label(droplet.get('name')), slug(droplet.get('region'))]
            size = droplet.get('size') or {}

            up.add_metric(labels, flag(droplet.get('status') == 'active'))
            cpus.add_metric(labels, to_float(droplet.get('vcpus')))
            memory.add_metric(labels, to_float(droplet.get('memory')) * MIB)
            disk.add_metric(labels, to_float(droplet.get('disk')) * GIB)
            price_hourly.add_metric(labels, to_float(size.get('price_hourly')))
            price_monthly.add_metric(labels, to_float(size.get('price_monthly')))

        yield up
        yield cpus
        yield memory
        yield disk
        yield price_hourly
        yield price_monthly
