# -*- coding: utf-8 -*-
"""
负载均衡采集器

功能：
- 调用 GET /v2/load_balancers（自动翻页）
- 暴露状态和后端 Droplet 数量
"""

from collector.base import MetricDescriptor, ResourceCollector, flag, label

LABELS = ('id', 'name', 'ip')


class LoadBalancerCollector(ResourceCollector):
    """负载均衡采集器"""

    name = 'load_balancer'

    status = MetricDescriptor(
        'digitalocean_loadbalancer_status',
        "The status of the load balancer, 1 if active",
        LABELS,
    )
    droplets = MetricDescriptor(
        'digitalocean_loadbalancer_droplets',
        "The number of droplets this load balancer is proxying to",
        LABELS,
    )

    descriptors = (status, droplets)

    def collect(self):
        load_balancers = self._fetch('load balancers', self.client.list_load_balancers)
        if load_balancers is None:
            return

        status = self.status.family()
        droplets = self.droplets.family()

        for lb in load_balancers:
            labels = [label(lb.get('id')), label(lb.get('name')), label(lb.get('ip'))]
            status.add_metric(labels, flag(lb.get('status') == 'active'))
            droplets.add_metric(labels, float(len(lb.get('droplet_ids') or [])))

        yield status
        yield droplets
