# -*- coding: utf-8 -*-
"""
域名采集器

功能：
- 调用 GET /v2/domains 获取域名列表
- 对每个域名调用 GET /v2/domains/{name}/records 获取解析记录
- 每个域名的解析记录独立采集，单个域名失败不影响其他域名
"""

from collector.base import MetricDescriptor, ResourceCollector, label, to_float

RECORD_LABELS = ('id', 'domain', 'type', 'name', 'data')


class DomainCollector(ResourceCollector):
    """域名采集器"""

    name = 'domain'

    ttl = MetricDescriptor(
        'digitalocean_domain_ttl_seconds',
        "Seconds that clients can cache queried information before a refresh should be requested",
        ('name',),
    )
    record_port = MetricDescriptor(
        'digitalocean_domain_record_port',
        "The port for SRV records",
        RECORD_LABELS,
    )
    record_priority = MetricDescriptor(
        'digitalocean_domain_record_priority',
        "The priority for SRV and MX records",
        RECORD_LABELS,
    )
    record_weight = MetricDescriptor(
        'digitalocean_domain_record_weight',
        "The weight for SRV records",
        RECORD_LABELS,
    )

    descriptors = (ttl, record_port, record_priority, record_weight)

    def collect(self):
        domains = self._fetch('domains', self.client.list_domains)
        if domains is None:
            return

        ttl = self.ttl.family()
        for domain in domains:
            ttl.add_metric([label(domain.get('name'))], to_float(domain.get('ttl')))
        yield ttl

        record_port = self.record_port.family()
        record_priority = self.record_priority.family()
        record_weight = self.record_weight.family()
        fetched = 0

        # 所有域名的解析记录共享一个截止时间
        deadline = self.new_deadline()
        for domain in domains:
            domain_name = label(domain.get('name'))
            records = self._fetch(
                f'records of domain {domain_name}',
                lambda deadline: self.client.list_domain_records(domain_name, deadline=deadline),
                deadline=deadline,
            )
            if records is None:
                continue
            fetched += 1

            for record in records:
                labels = [
                    label(record.get('id')),
                    domain_name,
                    label(record.get('type')),
                    label(record.get('name')),
                    label(record.get('data')),
                ]
                record_port.add_metric(labels, to_float(record.get('port')))
                record_priority.add_metric(labels, to_float(record.get('priority')))
                record_weight.add_metric(labels, to_float(record.get('weight')))

        # 所有域名的解析记录都获取失败时不输出
        if domains and not fetched:
            return

        yield record_port
        yield record_priority
        yield record_weight
