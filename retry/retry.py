# -*- coding: utf-8 -*-
"""
重试机制实现模块

功能：
- 指数退避重试，等待时间在 [wait_min, wait_max] 之间
- 可配置重试次数和等待区间
- 受调用方截止时间约束：等待会超过截止时间时立即放弃
- 关闭 urllib3 连接池层面的重试，统一由 retry_with_backoff 处理
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

# 默认重试策略：最多 3 次，等待时间在 3 秒到 6 秒之间
DEFAULT_RETRY_MAX = 3
DEFAULT_RETRY_WAIT_MIN = 3.0
DEFAULT_RETRY_WAIT_MAX = 6.0

# 限流和服务端错误才重试
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


@dataclass(frozen=True)
class RetryPolicy:
    """重试策略"""
    max_retries: int = DEFAULT_RETRY_MAX
    wait_min: float = DEFAULT_RETRY_WAIT_MIN
    wait_max: float = DEFAULT_RETRY_WAIT_MAX
    status_codes: Tuple[int, ...] = RETRY_STATUS_CODES

    def backoff(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """
        计算第 attempt 次重试前的等待时间（attempt 从 0 开始）

        服务端给出 Retry-After 时以其为准，否则为 wait_min * 2^attempt，不超过 wait_max
        """
        if retry_after is not None:
            return max(0.0, retry_after)
        return min(self.wait_max, self.wait_min * (2 ** attempt))

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.status_codes


def build_retry(
    max_retries: int = DEFAULT_RETRY_MAX,
    wait_min: float = DEFAULT_RETRY_WAIT_MIN,
    wait_max: float = DEFAULT_RETRY_WAIT_MAX,
    status_codes: Iterable[int] = RETRY_STATUS_CODES,
) -> RetryPolicy:
    """
    构建指数退避的重试策略

    Args:
        max_retries: 最大重试次数（不含首次请求）
        wait_min: 首次重试前的等待时间（秒）
        wait_max: 单次等待上限（秒）
        status_codes: 需要重试的 HTTP 状态码

    Returns:
        RetryPolicy 对象

    Raises:
        ValueError: 参数无效
    """
    if max_retries < 0:
        raise ValueError("max_retries 不能为负数")
    if wait_min <= 0 or wait_max < wait_min:
        raise ValueError(f"等待区间无效: min={wait_min}, max={wait_max}")

    return RetryPolicy(
        max_retries=max_retries,
        wait_min=wait_min,
        wait_max=wait_max,
        status_codes=tuple(status_codes),
    )


def retry_with_backoff(
    func: Callable[[], Any],
    policy: RetryPolicy,
    should_retry: Callable[[Exception], bool],
    deadline: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """
    使用指数退避执行重试

    Args:
        func: 要执行的函数（无参数），失败时抛出异常
        policy: 重试策略
        should_retry: 判断异常是否可重试
        deadline: 截止时间（time.monotonic() 基准），None 表示不限制
        sleep: 等待函数（测试时可替换）

    Returns:
        函数执行结果

    Raises:
        func 最后一次抛出的异常（不可重试、次数用尽，或等待会超过截止时间）
    """
    attempt = 0
    while True:
        try:
            return func()
        except Exception as e:
            if attempt >= policy.max_retries or not should_retry(e):
                raise

            wait = policy.backoff(attempt, getattr(e, 'retry_after', None))
            if deadline is not None and wait >= deadline - time.monotonic():
                logger.debug(f"等待 {wait:.1f}s 会超过截止时间，放弃重试: {e}")
                raise

            attempt += 1
            logger.debug(f"第 {attempt} 次重试，等待 {wait:.1f}s: {e}")
            sleep(wait)


def mount_retry_adapter(session: requests.Session) -> requests.Session:
    """
    为 Session 的 http/https 挂载不做重试的 Adapter

    urllib3 的退避等待不感知截止时间，重试统一交给 retry_with_backoff

    Args:
        session: requests Session

    Returns:
        同一个 Session（便于链式调用）
    """
    adapter = HTTPAdapter(max_retries=Retry(total=0, read=False, raise_on_status=False))
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session
