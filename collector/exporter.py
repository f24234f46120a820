# -*- coding: utf-8 -*-
"""
Exporter 自身信息采集器

功能：
- 暴露版本、构建信息和启动时间
- 不访问任何外部接口
"""

from prometheus_client.core import GaugeMetricFamily

from collector.base import MetricDescriptor


class ExporterCollector:
    """Exporter 自身信息采集器"""

    build_info = MetricDescriptor(
        'digitalocean_exporter_build_info',
        "A metric with a constant '1' value labeled by version, revision, builddate and pythonversion",
        ('version', 'revision', 'builddate', 'pythonversion'),
    )
    start_time = MetricDescriptor(
        'digitalocean_exporter_start_time',
        "The time the exporter was started, as a unix timestamp",
    )

    def __init__(self, version: str, revision: str, build_date: str, python_version: str, start_time: float):
        self.version = version
        self.revision = revision
        self.build_date = build_date
        self.python_version = python_version
        self.started_at = start_time

    def describe(self):
        return [self.build_info.family(), self.start_time.family()]

    def collect(self):
        build_info: GaugeMetricFamily = self.build_info.family()
        build_info.add_metric([self.version, self.revision, self.build_date, self.python_version], 1.0)
        yield build_info

        start_time = self.start_time.family()
        start_time.add_metric([], self.started_at)
        yield start_time
