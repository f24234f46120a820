# -*- coding: utf-8 -*-
"""
资源采集器接口

功能：
- 定义指标描述（MetricDescriptor），每个采集器声明一次，跨抓取共享
- 定义 ResourceCollector 接口（describe / collect），每种资源类型一个实现
- 统一 API 调用的超时控制和错误处理：
  调用失败只记录日志并累加错误计数，不输出该记录类型的任何样本，也不影响整次抓取
"""

import logging
import math
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, Tuple

from prometheus_client import Counter
from prometheus_client.core import GaugeMetricFamily, Metric

from collector.errlimit import summarize_error


@dataclass(frozen=True)
class MetricDescriptor:
    """指标描述：名称、帮助文本、标签"""
    name: str
    documentation: str
    labels: Tuple[str, ...] = ()

    def family(self) -> GaugeMetricFamily:
        """创建本次抓取使用的空指标族"""
        return GaugeMetricFamily(self.name, self.documentation, labels=list(self.labels))


class ResourceCollector(ABC):
    """
    资源采集器接口

    每种资源类型一个实现，由 prometheus_client 的 CollectorRegistry 在每次抓取时调用：
    - describe(): 返回固定的指标描述，不访问网络
    - collect(): 调用 API，将记录转换为样本

    子类需要设置 name（错误计数的 collector 标签值）和 descriptors
    """

    name: str = ''
    descriptors: Tuple[MetricDescriptor, ...] = ()

    def __init__(self, logger: logging.Logger, errors: Counter, client: Any, timeout: float):
        """
        初始化采集器

        Args:
            logger: 日志记录器
            errors: 共享错误计数器（标签: collector）
            client: API 客户端
            timeout: 单次调用超时（秒）
        """
        self.logger = logger
        self.errors = errors
        self.client = client
        self.timeout = timeout

        # 预先创建标签，未出错时也暴露 0
        self.errors.labels(collector=self.name)

    def describe(self) -> List[Metric]:
        return [descriptor.family() for descriptor in self.descriptors]

    def new_deadline(self) -> float:
        """从现在起 timeout 秒后的截止时间（time.monotonic() 基准）"""
        return time.monotonic() + self.timeout

    @abstractmethod
    def collect(self) -> Iterable[Metric]:
        """调用 API 并生成指标族"""

    def _fetch(self, record_type: str, func: Callable[..., Any],
               deadline: Optional[float] = None) -> Optional[Any]:
        """
        在截止时间内执行一次 API 调用

        Args:
            record_type: 记录类型（用于日志，如 'droplets'）
            func: 接收 deadline 关键字参数的调用
            deadline: 多次调用共享的截止时间；默认从现在起 timeout 秒

        Returns:
            调用结果；失败（含超时）时返回 None
        """
        if deadline is None:
            deadline = self.new_deadline()
        try:
            return func(deadline=deadline)
        except Exception as e:
            self.logger.warning(
                f"无法获取 {record_type} (collector: {self.name}): {summarize_error(e)}"
            )
            self.errors.labels(collector=self.name).inc()
            return None


def label(value: Any) -> str:
    """将记录字段转换为标签值，None 转为空字符串"""
    if value is None:
        return ''
    return str(value)


def slug(value: Any) -> str:
    """
    提取区域 slug

    API 中 region 有时是字符串（'nyc1'），有时是对象（{'slug': 'nyc1', ...}）
    """
    if isinstance(value, dict):
        return label(value.get('slug'))
    return label(value)


def to_float(value: Any) -> float:
    """转换为 float，无法转换时返回 NaN"""
    if value is None or value == '':
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def flag(condition: bool) -> float:
    """布尔值转换为 1.0 / 0.0"""
    return 1.0 if condition else 0.0


def parse_timestamp(value: Optional[str]) -> float:
    """
    解析 RFC 3339 时间字符串为 Unix 时间戳（秒）

    Args:
        value: 如 '2020-11-19T20:27:18Z'

    Returns:
        时间戳；无法解析时返回 NaN
    """
    if not value:
        return math.nan
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            text = re.sub(r'(\.\d{6})\d+', r'\1', str(value))
            parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            return math.nan
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()
