# -*- coding: utf-8 -*-
"""
配置加载模块

功能：
- 从环境变量加载配置（可选 .env 文件）
- 命令行参数可覆盖环境变量
- 定义清晰的数据结构（ExporterConfig）
- 配置无效时给出明确错误
"""

import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

DEFAULT_HTTP_TIMEOUT_MS = 5000
DEFAULT_WEB_ADDR = ':9212'
DEFAULT_WEB_PATH = '/metrics'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


class ConfigError(ValueError):
    """配置无效"""


@dataclass(frozen=True)
class ExporterConfig:
    """Exporter 配置的根数据结构"""
    token: str                              # DigitalOcean API Token（必填）
    spaces_access_key_id: str = ''          # Spaces Access Key ID（可选）
    spaces_access_key_secret: str = ''      # Spaces Access Key Secret（可选）
    http_timeout_ms: int = DEFAULT_HTTP_TIMEOUT_MS  # 单次 API 调用超时（毫秒）
    debug: bool = False                     # 是否输出 DEBUG 日志
    web_addr: str = DEFAULT_WEB_ADDR        # 监听地址
    web_path: str = DEFAULT_WEB_PATH        # metrics 路径

    @property
    def timeout(self) -> float:
        """单次 API 调用超时（秒）"""
        return self.http_timeout_ms / 1000.0

    @property
    def spaces_enabled(self) -> bool:
        """Access Key ID 和 Secret 都配置时才采集 Spaces"""
        return bool(self.spaces_access_key_id) and bool(self.spaces_access_key_secret)

    @property
    def listen(self) -> Tuple[str, int]:
        """解析后的 (host, port)"""
        return parse_web_addr(self.web_addr)


def parse_web_addr(addr: str) -> Tuple[str, int]:
    """
    解析监听地址

    Args:
        addr: 如 ':9212'、'127.0.0.1:9212'、'[::1]:9212'

    Returns:
        (host, port)，host 为空时监听所有地址（0.0.0.0）

    Raises:
        ConfigError: 地址格式错误
    """
    host, sep, port = addr.rpartition(':')
    if not sep:
        raise ConfigError(f"WEB_ADDR 格式错误（需要 host:port）: {addr!r}")

    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"WEB_ADDR 端口必须是整数: {addr!r}")
    if not 0 < port_number < 65536:
        raise ConfigError(f"WEB_ADDR 端口超出范围（1-65535）: {addr!r}")

    host = host.strip('[]')
    return host or '0.0.0.0', port_number


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def build_parser(environ: Mapping[str, str]) -> argparse.ArgumentParser:
    """
    构建命令行参数解析器，默认值取自环境变量

    Args:
        environ: 环境变量
    """
    parser = argparse.ArgumentParser(
        prog='digitalocean_exporter',
        description='Prometheus exporter for DigitalOcean resources',
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        default=_parse_bool(environ.get('DEBUG', '')),
        help='enable debug logging [env: DEBUG]',
    )
    parser.add_argument(
        '--digitalocean-token',
        dest='token',
        default=environ.get('DIGITALOCEAN_TOKEN', ''),
        help='DigitalOcean API token [env: DIGITALOCEAN_TOKEN]',
    )
    parser.add_argument(
        '--spaces-access-key-id',
        dest='spaces_access_key_id',
        default=environ.get('DIGITALOCEAN_SPACES_ACCESS_KEY_ID', ''),
        help='Spaces access key id [env: DIGITALOCEAN_SPACES_ACCESS_KEY_ID]',
    )
    parser.add_argument(
        '--spaces-access-key-secret',
        dest='spaces_access_key_secret',
        default=environ.get('DIGITALOCEAN_SPACES_ACCESS_KEY_SECRET', ''),
        help='Spaces access key secret [env: DIGITALOCEAN_SPACES_ACCESS_KEY_SECRET]',
    )
    parser.add_argument(
        '--http-timeout',
        dest='http_timeout',
        default=environ.get('HTTP_TIMEOUT') or str(DEFAULT_HTTP_TIMEOUT_MS),
        help='timeout of each API call in milliseconds [env: HTTP_TIMEOUT]',
    )
    parser.add_argument(
        '--web-addr',
        dest='web_addr',
        default=environ.get('WEB_ADDR') or DEFAULT_WEB_ADDR,
        help='address to listen on [env: WEB_ADDR]',
    )
    parser.add_argument(
        '--web-path',
        dest='web_path',
        default=environ.get('WEB_PATH') or DEFAULT_WEB_PATH,
        help='path to expose metrics on [env: WEB_PATH]',
    )
    return parser


def load_config(argv: Optional[Sequence[str]] = None,
                environ: Optional[Mapping[str, str]] = None) -> ExporterConfig:
    """
    加载 Exporter 配置

    Args:
        argv: 命令行参数（默认 sys.argv[1:]）
        environ: 环境变量（默认 os.environ）

    Returns:
        ExporterConfig 对象

    Raises:
        ConfigError: 缺少 Token 或字段值无效
    """
    if environ is None:
        environ = os.environ

    args = build_parser(environ).parse_args(argv)

    token = (args.token or '').strip()
    if not token:
        raise ConfigError("DigitalOcean Token is required (DIGITALOCEAN_TOKEN)")

    try:
        http_timeout_ms = int(args.http_timeout)
    except (TypeError, ValueError):
        raise ConfigError(f"HTTP_TIMEOUT 必须是整数（毫秒）: {args.http_timeout!r}")
    if http_timeout_ms <= 0:
        raise ConfigError(f"HTTP_TIMEOUT 必须是正整数: {http_timeout_ms}")

    web_path = args.web_path
    if not web_path.startswith('/'):
        raise ConfigError(f"WEB_PATH 必须以 / 开头: {web_path!r}")
    if web_path in ('/', '/healthz'):
        raise ConfigError(f"WEB_PATH 与内置端点冲突: {web_path!r}")

    # 提前校验监听地址
    parse_web_addr(args.web_addr)

    return ExporterConfig(
        token=token,
        spaces_access_key_id=(args.spaces_access_key_id or '').strip(),
        spaces_access_key_secret=(args.spaces_access_key_secret or '').strip(),
        http_timeout_ms=http_timeout_ms,
        debug=bool(args.debug),
        web_addr=args.web_addr,
        web_path=web_path,
    )
