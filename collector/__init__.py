# -*- coding: utf-8 -*-
"""
Prometheus Collector 模块

功能：
- 每种 DigitalOcean 资源一个采集器，抓取时实时调用 API
- 单个采集器失败只累加错误计数，不影响其他采集器
- 暴露 Prometheus 格式的指标
"""

from .base import MetricDescriptor, ResourceCollector
from .errlimit import summarize_error
from .exporter import ExporterCollector
from .registry import build_collectors, build_registry, new_error_counter
