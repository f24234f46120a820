# -*- coding: utf-8 -*-
"""
采集器注册模块

功能：
- 创建共享错误计数器
- 按资源类型创建采集器，注入日志、错误计数器、API 客户端和超时
- Spaces 采集器仅在凭证齐全时注册
- 汇总到独立的 CollectorRegistry（不使用全局 REGISTRY）
"""

import logging
from typing import Callable, List, Optional

from prometheus_client import CollectorRegistry, Counter, GCCollector, PlatformCollector, ProcessCollector

from api.digitalocean.client import DigitalOceanClient
from api.digitalocean.spaces import SpacesClient
from api.digitalocean.status import StatusPageClient
from collector.account import AccountCollector
from collector.app import AppCollector
from collector.balance import BalanceCollector
from collector.database import DatabaseCollector
from collector.domain import DomainCollector
from collector.droplet import DropletCollector
from collector.exporter import ExporterCollector
from collector.floating_ip import FloatingIPCollector
from collector.image import ImageCollector
from collector.incident import IncidentCollector
from collector.key import KeyCollector
from collector.kubernetes import KubernetesCollector
from collector.load_balancer import LoadBalancerCollector
from collector.snapshot import SnapshotCollector
from collector.spaces import SpacesCollector
from collector.volume import VolumeCollector
from config.loader import ExporterConfig

# 使用 DigitalOcean API 客户端的采集器
RESOURCE_COLLECTORS = (
    AccountCollector,
    AppCollector,
    BalanceCollector,
    DatabaseCollector,
    DomainCollector,
    DropletCollector,
    FloatingIPCollector,
    ImageCollector,
    KeyCollector,
    LoadBalancerCollector,
    SnapshotCollector,
    VolumeCollector,
    KubernetesCollector,
)


def new_error_counter() -> Counter:
    """创建错误计数器（未注册到任何 registry）"""
    return Counter(
        'digitalocean_errors_total',
        'The total number of errors per collector',
        ['collector'],
        registry=None,
    )


def build_collectors(
    config: ExporterConfig,
    client: DigitalOceanClient,
    logger: logging.Logger,
    errors: Counter,
    status_client: Optional[StatusPageClient] = None,
    spaces_client_factory: Optional[Callable[..., SpacesClient]] = None,
) -> List:
    """
    创建所有资源采集器

    Args:
        config: Exporter 配置
        client: DigitalOcean API 客户端
        logger: 日志记录器
        errors: 共享错误计数器
        status_client: 状态页客户端（可选）
        spaces_client_factory: Spaces 客户端工厂（默认 SpacesClient，测试时可替换）

    Returns:
        采集器列表
    """
    timeout = config.timeout

    collectors = [cls(logger, errors, client, timeout) for cls in RESOURCE_COLLECTORS]
    collectors.append(IncidentCollector(logger, errors, timeout, client=status_client))

    if config.spaces_enabled:
        factory = spaces_client_factory or SpacesClient
        spaces_client = factory(
            config.spaces_access_key_id,
            config.spaces_access_key_secret,
            timeout,
        )
        collectors.append(SpacesCollector(logger, errors, spaces_client, timeout))

    return collectors


def build_registry(
    config: ExporterConfig,
    client: DigitalOceanClient,
    logger: logging.Logger,
    errors: Counter,
    exporter: ExporterCollector,
    status_client: Optional[StatusPageClient] = None,
    spaces_client_factory: Optional[Callable[..., SpacesClient]] = None,
    process_metrics: bool = True,
) -> CollectorRegistry:
    """
    构建 CollectorRegistry

    Args:
        config: Exporter 配置
        client: DigitalOcean API 客户端
        logger: 日志记录器
        errors: 共享错误计数器
        exporter: Exporter 自身信息采集器
        status_client: 状态页客户端（可选）
        spaces_client_factory: Spaces 客户端工厂
        process_metrics: 是否注册进程级指标（CPU、内存、GC 等）

    Returns:
        CollectorRegistry
    """
    registry = CollectorRegistry()

    if process_metrics:
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        GCCollector(registry=registry)

    registry.register(errors)
    registry.register(exporter)

    for collector in build_collectors(config, client, logger, errors, status_client, spaces_client_factory):
        registry.register(collector)
        logger.debug(f"已注册采集器: {collector.name}")

    return registry
