# -*- coding: utf-8 -*-
"""
故障事件采集器

功能：
- 从 DigitalOcean 状态页获取未解决的故障事件
- 不依赖 DigitalOcean API 客户端，也不需要 Token
"""

import logging
from typing import Optional

from prometheus_client import Counter

from api.digitalocean.status import StatusPageClient
from collector.base import MetricDescriptor, ResourceCollector, label


class IncidentCollector(ResourceCollector):
    """故障事件采集器"""

    name = 'incident'

    unresolved = MetricDescriptor(
        'digitalocean_incidents_unresolved',
        "The number of unresolved incidents reported on the DigitalOcean status page",
    )
    incident = MetricDescriptor(
        'digitalocean_incident',
        "Information about unresolved incidents reported on the DigitalOcean status page",
        ('id', 'name', 'status', 'impact'),
    )

    descriptors = (unresolved, incident)

    def __init__(self, logger: logging.Logger, errors: Counter, timeout: float,
                 client: Optional[StatusPageClient] = None):
        """
        初始化故障事件采集器

        Args:
            logger: 日志记录器
            errors: 共享错误计数器
            timeout: 单次调用超时（秒）
            client: 状态页客户端（默认访问 status.digitalocean.com）
        """
        super().__init__(logger, errors, client or StatusPageClient(), timeout)

    def collect(self):
        incidents = self._fetch('incidents', self.client.list_unresolved_incidents)
        if incidents is None:
            return

        unresolved = self.unresolved.family()
        unresolved.add_metric([], float(len(incidents)))
        yield unresolved

        incident = self.incident.family()
        for item in incidents:
            incident.add_metric(
                [
                    label(item.get('id')),
                    label(item.get('name')),
                    label(item.get('status')),
                    label(item.get('impact')),
                ],
                1.0,
            )
        yield incident
