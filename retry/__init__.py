# -*- coding: utf-8 -*-
"""
重试模块

功能：
- 为出站 HTTP 请求提供有上限、受截止时间约束的指数退避重试
"""

from .retry import RetryPolicy, build_retry, mount_retry_adapter, retry_with_backoff

__all__ = ['RetryPolicy', 'build_retry', 'mount_retry_adapter', 'retry_with_backoff']
