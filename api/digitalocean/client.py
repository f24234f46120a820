# -*- coding: utf-8 -*-
"""
DigitalOcean API 客户端模块

功能：
- 封装 DigitalOcean REST API v2 调用（Droplets, Databases, Volumes 等）
- 使用静态 Bearer Token 认证
- 自动翻页，所有页获取成功后才返回
- 每次调用受截止时间（deadline）约束，重试等待也不会超过截止时间
- 带指数退避的自动重试（见 retry 模块）
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from retry.retry import RetryPolicy, build_retry, mount_retry_adapter, retry_with_backoff

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.digitalocean.com"
USER_AGENT = "digitalocean_exporter"

# DigitalOcean 单页最大条数
DEFAULT_PER_PAGE = 200

# 这些状态码的响应可能带 Retry-After
RETRY_AFTER_STATUS_CODES = (429, 503)


class DigitalOceanError(Exception):
    """DigitalOcean API 调用失败（网络错误、响应无效等）"""


class DigitalOceanTimeout(DigitalOceanError):
    """调用超过截止时间"""


class DigitalOceanConnectionError(DigitalOceanError):
    """连接失败（可重试）"""


class DigitalOceanAPIError(DigitalOceanError):
    """API 返回非 2xx 状态码"""

    def __init__(self, method: str, url: str, status_code: int, message: str,
                 retry_after: Optional[float] = None):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.message = message
        self.retry_after = retry_after
        super().__init__(f"{method} {url}: {status_code} {message}")


def remaining_time(deadline: Optional[float]) -> Optional[float]:
    """
    计算距离截止时间的剩余秒数

    Args:
        deadline: time.monotonic() 基准的截止时间，None 表示不限制

    Returns:
        剩余秒数；deadline 为 None 时返回 None

    Raises:
        DigitalOceanTimeout: 已超过截止时间
    """
    if deadline is None:
        return None
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise DigitalOceanTimeout("context deadline exceeded")
    return remaining


def should_retry(policy: RetryPolicy, err: Exception) -> bool:
    """连接失败和限流/服务端错误可重试；超时和其他错误不重试"""
    if isinstance(err, DigitalOceanAPIError):
        return policy.is_retryable_status(err.status_code)
    return isinstance(err, DigitalOceanConnectionError)


def send_get(session: requests.Session, url: str, params: Optional[Dict[str, Any]] = None,
             deadline: Optional[float] = None) -> requests.Response:
    """
    发送一次 GET 请求（不重试），socket 超时为距截止时间的剩余时间

    Raises:
        DigitalOceanTimeout: 已超过截止时间或请求超时
        DigitalOceanConnectionError: 连接失败
        DigitalOceanAPIError: 非 2xx 响应
        DigitalOceanError: 其他网络错误
    """
    timeout = remaining_time(deadline)

    try:
        response = session.get(url, params=params, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise DigitalOceanTimeout(f"GET {url}: {e}") from e
    except requests.exceptions.ConnectionError as e:
        raise DigitalOceanConnectionError(f"GET {url}: {e}") from e
    except requests.exceptions.RequestException as e:
        raise DigitalOceanError(f"GET {url}: {e}") from e

    if not response.ok:
        retry_after = None
        if response.status_code in RETRY_AFTER_STATUS_CODES:
            retry_after = _retry_after(response)
        raise DigitalOceanAPIError('GET', url, response.status_code, _error_message(response), retry_after)
    return response


class DigitalOceanClient:
    """
    DigitalOcean API 客户端

    功能：
    - 调用 DigitalOcean API 获取资源信息
    - 处理分页（links.pages.next）
    - 返回 API 原始记录（dict）
    """

    def __init__(
        self,
        token: str,
        base_url: str = API_BASE_URL,
        retry: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        user_agent: str = USER_AGENT,
    ):
        """
        初始化 DigitalOcean 客户端

        Args:
            token: API Bearer Token
            base_url: API 地址（测试时可替换）
            retry: 重试策略，默认最多 3 次、等待 3~6 秒
            session: requests Session（可选）
            user_agent: User-Agent 头

        Raises:
            ValueError: token 为空
        """
        if not token:
            raise ValueError("DigitalOcean token 不能为空")

        self.base_url = base_url.rstrip('/')
        self.retry = retry or build_retry()
        self.session = mount_retry_adapter(session or requests.Session())
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Accept': 'application/json',
            'User-Agent': user_agent,
        })
        logger.debug(f"DigitalOcean 客户端初始化成功: {self.base_url}")

    def get(self, path: str, params: Optional[Dict[str, Any]] = None,
            deadline: Optional[float] = None) -> Dict[str, Any]:
        """
        发送 GET 请求并解析 JSON，失败时按重试策略重试

        Args:
            path: API 路径（如 '/v2/account'）或完整 URL（翻页链接）
            params: 查询参数
            deadline: 截止时间（time.monotonic() 基准），对所有重试整体生效

        Returns:
            响应 JSON

        Raises:
            DigitalOceanTimeout: 超时
            DigitalOceanAPIError: 非 2xx 响应
            DigitalOceanError: 网络错误或响应不是合法 JSON
        """
        url = path if path.startswith('http') else f"{self.base_url}{path}"

        response = retry_with_backoff(
            lambda: send_get(self.session, url, params=params, deadline=deadline),
            self.retry,
            should_retry=lambda e: should_retry(self.retry, e),
            deadline=deadline,
        )

        try:
            data = response.json()
        except ValueError as e:
            raise DigitalOceanError(f"GET {url}: 响应不是合法 JSON") from e

        if not isinstance(data, dict):
            raise DigitalOceanError(f"GET {url}: 响应格式错误")
        return data

    def list_all(self, path: str, key: str, params: Optional[Dict[str, Any]] = None,
                 deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """
        获取列表接口的全部记录（自动翻页）

        任意一页失败都会抛出异常，不返回部分结果

        Args:
            path: API 路径（如 '/v2/droplets'）
            key: 响应中记录列表的字段名（如 'droplets'）
            params: 额外查询参数
            deadline: 截止时间，对所有页整体生效

        Returns:
            记录列表
        """
        query = {'per_page': DEFAULT_PER_PAGE}
        if params:
            query.update(params)

        records = []
        next_url: Optional[str] = path
        page = 0

        while next_url:
            data = self.get(next_url, params=query, deadline=deadline)
            page += 1
            records.extend(data.get(key) or [])

            next_url = (((data.get('links') or {}).get('pages') or {}).get('next'))
            # 翻页链接已包含查询参数
            query = None

        logger.debug(f"{path}: 共 {page} 页, {len(records)} 条记录")
        return records

    def get_account(self, deadline: Optional[float] = None) -> Dict[str, Any]:
        """获取账号信息"""
        return self.get('/v2/account', deadline=deadline).get('account') or {}

    def get_balance(self, deadline: Optional[float] = None) -> Dict[str, Any]:
        """获取账单余额"""
        return self.get('/v2/customers/my/balance', deadline=deadline)

    def list_apps(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有 App Platform 应用"""
        return self.list_all('/v2/apps', 'apps', deadline=deadline)

    def list_databases(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有托管数据库集群"""
        return self.list_all('/v2/databases', 'databases', deadline=deadline)

    def list_domains(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有域名"""
        return self.list_all('/v2/domains', 'domains', deadline=deadline)

    def list_domain_records(self, domain: str, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出指定域名的所有解析记录"""
        return self.list_all(f'/v2/domains/{domain}/records', 'domain_records', deadline=deadline)

    def list_droplets(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有 Droplet"""
        return self.list_all('/v2/droplets', 'droplets', deadline=deadline)

    def list_floating_ips(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有浮动 IP"""
        return self.list_all('/v2/floating_ips', 'floating_ips', deadline=deadline)

    def list_images(self, private: bool = True, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """
        列出镜像

        Args:
            private: 只列出用户自己的镜像（默认 True）
            deadline: 截止时间
        """
        params = {'private': 'true'} if private else None
        return self.list_all('/v2/images', 'images', params=params, deadline=deadline)

    def list_keys(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出账号下的 SSH 公钥"""
        return self.list_all('/v2/account/keys', 'ssh_keys', deadline=deadline)

    def list_load_balancers(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有负载均衡"""
        return self.list_all('/v2/load_balancers', 'load_balancers', deadline=deadline)

    def list_snapshots(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有快照（Droplet 和 Volume）"""
        return self.list_all('/v2/snapshots', 'snapshots', deadline=deadline)

    def list_volumes(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有块存储卷"""
        return self.list_all('/v2/volumes', 'volumes', deadline=deadline)

    def list_kubernetes_clusters(self, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """列出所有 Kubernetes 集群（包含节点池）"""
        return self.list_all('/v2/kubernetes/clusters', 'kubernetes_clusters', deadline=deadline)


def _error_message(response: requests.Response) -> str:
    """
    提取 API 错误信息

    DigitalOcean 错误响应一般为 {"id": "...", "message": "..."}，
    网关错误时可能是一整页 HTML，原样返回由调用方截断
    """
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason or ''

    if isinstance(data, dict) and data.get('message'):
        return data['message']
    return response.text or ''


def _retry_after(response: requests.Response) -> Optional[float]:
    """解析 Retry-After 头（只支持秒数）"""
    value = response.headers.get('Retry-After')
    if isinstance(value, str) and value.strip().isdigit():
        return float(value.strip())
    return None
