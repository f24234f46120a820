# -*- coding: utf-8 -*-
"""
App Platform 采集器

功能：
- 调用 GET /v2/apps（自动翻页）
- 暴露应用当前部署是否处于 ACTIVE 阶段
"""

from collector.base import MetricDescriptor, ResourceCollector, flag, label, parse_timestamp, slug

LABELS = ('id', 'name', 'region')


class AppCollector(ResourceCollector):
    """App Platform 采集器"""

    name = 'app'

    active = MetricDescriptor(
        'digitalocean_app_active',
        "Whether the active deployment of the app is in the ACTIVE phase (1) or not (0)",
        LABELS,
    )
    updated = MetricDescriptor(
        'digitalocean_app_updated_timestamp_seconds',
        "The time the app was last updated, as a unix timestamp",
        LABELS,
    )

    descriptors = (active, updated)

    def collect(self):
        apps = self._fetch('apps', self.client.list_apps)
        if apps is None:
            return

        active = self.active.family()
        updated = self.updated.family()

        for app in apps:
            spec = app.get('spec') or {}
            labels = [label(app.get('id')), label(spec.get('name')), slug(app.get('region'))]
            phase = (app.get('active_deployment') or {}).get('phase')

            active.add_metric(labels, flag(phase == 'ACTIVE'))
            updated.add_metric(labels, parse_timestamp(app.get('updated_at')))

        yield active
        yield updated
