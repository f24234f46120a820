# -*- coding: utf-8 -*-
"""
SSH 公钥采集器

功能：
- 调用 GET /v2/account/keys（自动翻页）
"""

from collector.base import MetricDescriptor, ResourceCollector, label


class KeyCollector(ResourceCollector):
    """SSH 公钥采集器"""

    name = 'key'

    key = MetricDescriptor(
        'digitalocean_key',
        "Information about keys in your digitalocean account",
        ('id', 'name', 'fingerprint'),
    )

    descriptors = (key,)

    def collect(self):
        keys = self._fetch('keys', self.client.list_keys)
        if keys is None:
            return

        family = self.key.family()
        for key in keys:
            family.add_metric(
                [label(key.get('id')), label(key.get('name')), label(key.get('fingerprint'))],
                1.0,
            )
        yield family
