# -*- coding: utf-8 -*-
"""
浮动 IP 采集器

功能：
- 调用 GET /v2/floating_ips（自动翻页）
- 已绑定到 Droplet 的 IP 视为 active
"""

from collector.base import MetricDescriptor, ResourceCollector, flag, label, slug


class FloatingIPCollector(ResourceCollector):
    """浮动 IP 采集器"""

    name = 'floating_ip'

    active = MetricDescriptor(
        'digitalocean_floating_ipv4_active',
        "If 1 the floating ip used by a droplet, 0 otherwise",
        ('ipv4', 'region', 'droplet_id', 'droplet_name'),
    )

    descriptors = (active,)

    def collect(self):
        floating_ips = self._fetch('floating ips', self.client.list_floating_ips)
        if floating_ips is None:
            return

        active = self.active.family()
        for ip in floating_ips:
            droplet = ip.get('droplet') or {}
            active.add_metric(
                [
                    label(ip.get('ip')),
                    slug(ip.get('region')),
                    label(droplet.get('id')),
                    label(droplet.get('name')),
                ],
                flag(bool(droplet)),
            )
        yield active
