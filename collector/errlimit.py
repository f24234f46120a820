# -*- coding: utf-8 -*-
"""
错误信息截断模块

功能：
- 将任意长度的错误信息截断为固定长度
- DigitalOcean API 出错时可能把整页 HTML（含内联 base64 图片）放进错误信息，
  原样写入日志会导致日志膨胀
"""

from typing import Optional

MAX_ERROR_LENGTH = 50
TRUNCATION_MARKER = "..."


def summarize_error(err: Optional[BaseException]) -> str:
    """
    返回适合写入日志的错误摘要

    Args:
        err: 异常对象（可为 None）

    Returns:
        None 时返回空字符串；不超过长度上限时原样返回；否则截断并追加省略标记
    """
    if err is None:
        return ""

    msg = str(err)
    if len(msg) < MAX_ERROR_LENGTH:
        return msg

    return msg[:MAX_ERROR_LENGTH] + TRUNCATION_MARKER
