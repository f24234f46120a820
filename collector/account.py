# -*- coding: utf-8 -*-
"""
账号采集器

功能：
- 调用 GET /v2/account
- 暴露账号状态和各类资源上限
"""

from collector.base import MetricDescriptor, ResourceCollector, flag, to_float


class AccountCollector(ResourceCollector):
    """账号采集器"""

    name = 'account'

    active = MetricDescriptor(
        'digitalocean_account_active',
        "The status of your account",
    )
    droplet_limit = MetricDescriptor(
        'digitalocean_account_droplet_limit',
        "The maximum number of droplet you can use",
    )
    floating_ip_limit = MetricDescriptor(
        'digitalocean_account_floating_ip_limit',
        "The maximum number of floating ips you can use",
    )
    volume_limit = MetricDescriptor(
        'digitalocean_account_volume_limit',
        "The maximum number of volumes you can use",
    )
    verified = MetricDescriptor(
        'digitalocean_account_verified',
        "1 if your email address was verified",
    )

    descriptors = (active, droplet_limit, floating_ip_limit, volume_limit, verified)

    def collect(self):
        account = self._fetch('account', self.client.get_account)
        if account is None:
            return

        active = self.active.family()
        active.add_metric([], flag(account.get('status') == 'active'))
        yield active

        droplet_limit = self.droplet_limit.family()
        droplet_limit.add_metric([], to_float(account.get('droplet_limit')))
        yield droplet_limit

        floating_ip_limit = self.floating_ip_limit.family()
        floating_ip_limit.add_metric([], to_float(account.get('floating_ip_limit')))
        yield floating_ip_limit

        volume_limit = self.volume_limit.family()
        volume_limit.add_metric([], to_float(account.get('volume_limit')))
        yield volume_limit

        verified = self.verified.family()
        verified.add_metric([], flag(account.get('email_verified')))
        yield verified
