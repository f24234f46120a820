#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DigitalOcean Exporter 主程序入口

功能：
- 启动 Flask HTTP 服务器
- 暴露 /metrics 端点供 Prometheus 抓取（每次抓取实时调用 DigitalOcean API）
- 暴露 /healthz 健康检查端点
- 暴露 / 首页
"""

import logging
import os
import platform
import socket
import sys
import time
from typing import Optional, Sequence

from dotenv import load_dotenv
from flask import Flask, render_template_string
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from werkzeug.serving import BaseWSGIServer, get_sockaddr, make_server, select_address_family

from api.digitalocean.client import DigitalOceanClient
from collector import ExporterCollector, build_registry, new_error_counter
from config.loader import ConfigError, ExporterConfig, load_config
from retry.retry import build_retry

__version__ = '0.1.0'

# 构建信息（镜像构建时通过环境变量注入）
REVISION = os.getenv('BUILD_REVISION', '')
BUILD_DATE = os.getenv('BUILD_DATE', '')
PYTHON_VERSION = platform.python_version()
START_TIME = time.time()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ROOT_TEMPLATE = """<!DOCTYPE html>
<html lang="en-US">
<head>
	<meta charset="utf-8">
	<title>DigitalOcean Exporter</title>
	<style>
	body {
		font-family: Verdana;
	}
	</style>
</head>
<body>
	<h2>DigitalOcean Exporter</h2>
	<li><a href="{{ metrics_path }}">metrics</a></li>
	<li><a href="/healthz">healthz</a></li>
</body>
</html>"""

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """
    配置日志

    Args:
        debug: True 时输出 DEBUG 日志，否则为 INFO
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        force=True,
    )
    # 减少 Flask 日志
    logging.getLogger('werkzeug').setLevel(logging.WARNING)


def create_app(registry: CollectorRegistry, metrics_path: str = '/metrics') -> Flask:
    """
    创建 Flask 应用

    Args:
        registry: 注册了所有采集器的 CollectorRegistry
        metrics_path: metrics 端点路径

    Returns:
        Flask 应用
    """
    app = Flask(__name__)

    def metrics():
        """
        Prometheus metrics 端点

        每次请求都会调用所有采集器；单个采集器失败不影响响应
        """
        return generate_latest(registry), 200, {'Content-Type': CONTENT_TYPE_LATEST}

    app.add_url_rule(metrics_path, 'metrics', metrics)

    @app.route('/')
    def index():
        """首页，链接到 metrics 和 healthz"""
        try:
            body = render_template_string(ROOT_TEMPLATE, metrics_path=metrics_path)
        except Exception as e:
            logger.error(f"无法渲染首页模板: {e}", exc_info=True)
            return 'internal server error', 500, {'Content-Type': 'text/plain; charset=UTF-8'}
        return body, 200, {'Content-Type': 'text/html; charset=UTF-8'}

    @app.route('/healthz')
    def healthz():
        """健康检查端点，只表示进程存活，不调用采集器"""
        return 'ok', 200, {'Content-Type': 'text/html; charset=UTF-8'}

    return app


def build_app(config: ExporterConfig) -> Flask:
    """
    根据配置创建 API 客户端、采集器和 Flask 应用

    Args:
        config: Exporter 配置

    Returns:
        Flask 应用

    Raises:
        Exception: API 客户端创建失败
    """
    # 自动重试和指数退避：最多 3 次，等待 3~6 秒
    client = DigitalOceanClient(config.token, retry=build_retry(max_retries=3, wait_min=3.0, wait_max=6.0))

    errors = new_error_counter()
    exporter = ExporterCollector(__version__, REVISION, BUILD_DATE, PYTHON_VERSION, START_TIME)
    registry = build_registry(
        config=config,
        client=client,
        logger=logging.getLogger('collector'),
        errors=errors,
        exporter=exporter,
    )
    return create_app(registry, config.web_path)


def make_listener(app: Flask, host: str, port: int) -> BaseWSGIServer:
    """
    绑定监听地址并创建多线程 HTTP 服务

    先自行绑定 socket 再交给 werkzeug，绑定失败时抛出 OSError
    （werkzeug 自己绑定失败时会直接退出进程，日志无法记录）

    Args:
        app: Flask 应用
        host: 监听地址
        port: 监听端口

    Returns:
        尚未开始服务的 WSGI server

    Raises:
        OSError: 地址无效或端口被占用
    """
    family = select_address_family(host, port)
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(get_sockaddr(host, port, family))
        sock.listen(socket.SOMAXCONN)
        return make_server(host, port, app, threaded=True, fd=sock.fileno())
    finally:
        # make_server 复制了文件描述符
        sock.close()


def main(argv: Optional[Sequence[str]] = None):
    """主函数"""
    load_dotenv()

    try:
        config = load_config(argv)
    except ConfigError as e:
        setup_logging()
        logger.error(f"配置无效: {e}")
        sys.exit(1)

    setup_logging(config.debug)

    logger.info(
        f"starting digitalocean_exporter: version={__version__}, revision={REVISION}, "
        f"buildDate={BUILD_DATE}, pythonVersion={PYTHON_VERSION}"
    )

    if not config.spaces_enabled:
        logger.warning("Spaces Access Key ID and Secret unset. Spaces buckets will not be collected")

    try:
        app = build_app(config)
    except Exception as e:
        logger.error(f"unable to create DigitalOcean API instance: {e}", exc_info=True)
        sys.exit(1)

    host, port = config.listen
    try:
        server = make_listener(app, host, port)
    except OSError as e:
        logger.error(f"http server error: {e}")
        sys.exit(1)

    logger.info(f"listening: addr={config.web_addr}, metrics_path={config.web_path}")
    server.serve_forever()


if __name__ == '__main__':
    main()
