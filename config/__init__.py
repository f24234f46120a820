# -*- coding: utf-8 -*-
"""
配置模块

功能：
- 从环境变量和命令行参数加载 Exporter 配置
"""

from .loader import ConfigError, ExporterConfig, load_config, parse_web_addr

__all__ = ['ConfigError', 'ExporterConfig', 'load_config', 'parse_web_addr']
