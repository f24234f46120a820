# -*- coding: utf-8 -*-
"""
DigitalOcean 状态页客户端模块

功能：
- 从 status.digitalocean.com（Statuspage v2 JSON API）获取未解决的故障事件
- 公开接口，不需要 API Token
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from api.digitalocean.client import DigitalOceanError, send_get, should_retry
from retry.retry import RetryPolicy, build_retry, mount_retry_adapter, retry_with_backoff

logger = logging.getLogger(__name__)

STATUS_PAGE_URL = "https://status.digitalocean.com"


class StatusPageClient:
    """状态页客户端"""

    def __init__(self, base_url: str = STATUS_PAGE_URL, session: Optional[requests.Session] = None,
                 retry: Optional[RetryPolicy] = None):
        self.base_url = base_url.rstrip('/')
        self.retry = retry or build_retry()
        self.session = mount_retry_adapter(session or requests.Session())
        self.session.headers.update({'Accept': 'application/json'})

    def list_unresolved_incidents(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """
        获取未解决的故障事件

        Args:
            deadline: 截止时间（time.monotonic() 基准）

        Returns:
            故障事件列表，每个包含 id, name, status, impact 等字段

        Raises:
            DigitalOceanError: 请求失败或响应无效
        """
        url = f"{self.base_url}/api/v2/incidents/unresolved.json"

        response = retry_with_backoff(
            lambda: send_get(self.session, url, deadline=deadline),
            self.retry,
            should_retry=lambda e: should_retry(self.retry, e),
            deadline=deadline,
        )

        try:
            data = response.json()
        except ValueError as e:
            raise DigitalOceanError(f"GET {url}: 响应不是合法 JSON") from e

        incidents = data.get('incidents') if isinstance(data, dict) else None
        if incidents is None:
            raise DigitalOceanError(f"GET {url}: 响应中缺少 incidents 字段")

        logger.debug(f"获取到 {len(incidents)} 个未解决的故障事件")
        return incidents
