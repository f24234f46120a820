# -*- coding: utf-8 -*-
"""
DigitalOcean API 客户端

功能：
- REST API v2 客户端（Bearer Token 认证、翻页、截止时间）
- Spaces（S3 兼容）客户端
- 状态页客户端（故障事件）
"""

from .client import (
    DigitalOceanClient,
    DigitalOceanError,
    DigitalOceanAPIError,
    DigitalOceanConnectionError,
    DigitalOceanTimeout,
)
from .spaces import SpacesClient, SPACES_REGIONS
from .status import StatusPageClient

__all__ = [
    'DigitalOceanClient',
    'DigitalOceanError',
    'DigitalOceanAPIError',
    'DigitalOceanConnectionError',
    'DigitalOceanTimeout',
    'SpacesClient',
    'SPACES_REGIONS',
    'StatusPageClient',
]
