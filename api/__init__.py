# -*- coding: utf-8 -*-
"""
云厂商 API 客户端模块
"""
