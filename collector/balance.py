# -*- coding: utf-8 -*-
"""
账单余额采集器

功能：
- 调用 GET /v2/customers/my/balance
- API 返回的金额是字符串（如 "23.44"），转换为 float
"""

from collector.base import MetricDescriptor, ResourceCollector, parse_timestamp, to_float


class BalanceCollector(ResourceCollector):
    """账单余额采集器"""

    name = 'balance'

    month_to_date_balance = MetricDescriptor(
        'digitalocean_balance_month_to_date',
        "Balance as of the digitalocean_balance_generated_at time",
    )
    account_balance = MetricDescriptor(
        'digitalocean_account_balance',
        "Current balance of your most recent billing activity",
    )
    month_to_date_usage = MetricDescriptor(
        'digitalocean_month_to_date_usage',
        "Amount used in the current billing period as of the digitalocean_balance_generated_at time",
    )
    generated_at = MetricDescriptor(
        'digitalocean_balance_generated_at',
        "The time at which balances were most recently generated, as a unix timestamp",
    )

    descriptors = (month_to_date_balance, account_balance, month_to_date_usage, generated_at)

    def collect(self):
        balance = self._fetch('balance', self.client.get_balance)
        if balance is None:
            return

        fields = (
            (self.month_to_date_balance, to_float(balance.get('month_to_date_balance'))),
            (self.account_balance, to_float(balance.get('account_balance'))),
            (self.month_to_date_usage, to_float(balance.get('month_to_date_usage'))),
            (self.generated_at, parse_timestamp(balance.get('generated_at'))),
        )
        for descriptor, value in fields:
            family = descriptor.family()
            family.add_metric([], value)
            yield family
