# -*- coding: utf-8 -*-
"""
Spaces Bucket 采集器

功能：
- 通过 S3 兼容接口列出各区域的 Bucket
- 每个区域独立采集，单个区域失败不影响其他区域
- 只有配置了 Access Key ID 和 Secret 时才会注册
"""

from collector.base import MetricDescriptor, ResourceCollector, label, parse_timestamp

LABELS = ('name', 'region')


class SpacesCollector(ResourceCollector):
    """Spaces Bucket 采集器"""

    name = 'spaces'

    bucket = MetricDescriptor(
        'digitalocean_spaces_bucket',
        "Information about Spaces buckets in your digitalocean account",
        LABELS,
    )
    created = MetricDescriptor(
        'digitalocean_spaces_bucket_created_timestamp_seconds',
        "The time the bucket was created, as a unix timestamp",
        LABELS,
    )

    descriptors = (bucket, created)

    def collect(self):
        bucket = self.bucket.family()
        created = self.created.family()
        fetched = 0

        # 所有区域共享一个截止时间
        deadline = self.new_deadline()
        for region in self.client.regions:
            buckets = self._fetch(
                f'spaces buckets in {region}',
                lambda deadline: self.client.list_buckets(region, deadline=deadline),
                deadline=deadline,
            )
            if buckets is None:
                continue
            fetched += 1

            for item in buckets:
                labels = [label(item.get('Name')), region]
                bucket.add_metric(labels, 1.0)
                created.add_metric(labels, parse_timestamp(item.get('CreationDate')))

        if not fetched:
            return

        yield bucket
        yield created
