# -*- coding: utf-8 -*-
"""
DigitalOcean Spaces 客户端模块

功能：
- Spaces 兼容 S3 协议，使用 boto3 访问各区域 endpoint
- 列出每个区域下的 Bucket
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import boto3
from botocore.config import Config

from api.digitalocean.client import remaining_time

logger = logging.getLogger(__name__)

# 提供 Spaces 服务的区域
SPACES_REGIONS = (
    'nyc3', 'sfo2', 'sfo3', 'ams3', 'sgp1', 'lon1', 'fra1', 'tor1', 'blr1', 'syd1', 'atl1',
)

SPACES_ENDPOINT = "https://{region}.digitaloceanspaces.com"


class SpacesClient:
    """
    Spaces 客户端

    功能：
    - 每个区域一个 S3 客户端（初始化时创建，不发起网络请求）
    - 调用受截止时间约束，剩余时间不足时使用更短的超时
    - 返回标准化的 Bucket 数据
    """

    def __init__(self, access_key_id: str, access_key_secret: str, timeout: float,
                 regions: Iterable[str] = SPACES_REGIONS, max_attempts: int = 1):
        """
        初始化 Spaces 客户端

        Args:
            access_key_id: Spaces Access Key ID
            access_key_secret: Spaces Access Key Secret
            timeout: 连接和读取超时（秒）
            regions: 需要采集的区域
            max_attempts: botocore 最大尝试次数（含首次请求，默认不重试）

        Raises:
            ValueError: 凭证为空
        """
        if not access_key_id or not access_key_secret:
            raise ValueError("Spaces Access Key ID 和 Secret 不能为空")

        self.regions = list(regions)
        self.timeout = timeout
        self._session = boto3.Session(
            aws_access_key_id=access_key_id,
            aws_secret_access_key=access_key_secret,
        )
        self._config = Config(
            connect_timeout=timeout,
            read_timeout=timeout,
            retries={'total_max_attempts': max_attempts, 'mode': 'standard'},
        )
        self._clients = {region: self._new_client(region, self._config) for region in self.regions}
        logger.debug(f"Spaces 客户端初始化成功，区域: {self.regions}")

    def _new_client(self, region: str, config: Config):
        return self._session.client(
            's3',
            region_name=region,
            endpoint_url=SPACES_ENDPOINT.format(region=region),
            config=config,
        )

    def _client_for(self, region: str, deadline: Optional[float]):
        """
        返回区域的 S3 客户端

        剩余时间少于 timeout 时，创建连接和读取超时不超过剩余时间的临时客户端
        """
        client = self._clients[region]
        remaining = remaining_time(deadline)
        if remaining is None or remaining >= self.timeout:
            return client
        config = self._config.merge(Config(connect_timeout=remaining, read_timeout=remaining))
        return self._new_client(region, config)

    def list_buckets(self, region: str, deadline: Optional[float] = None) -> List[Dict[str, Any]]:
        """
        列出指定区域的 Bucket

        Args:
            region: Spaces 区域（如 'nyc3'）
            deadline: 截止时间（time.monotonic() 基准）

        Returns:
            Bucket 列表，每个包含 Name 和 CreationDate

        Raises:
            KeyError: 区域未配置
            DigitalOceanTimeout: 已超过截止时间（不会发起请求）
            botocore.exceptions.BotoCoreError / ClientError: API 调用失败
        """
        client = self._client_for(region, deadline)
        response = client.list_buckets()

        buckets = [
            {
                'Name': bucket.get('Name', ''),
                'CreationDate': bucket.get('CreationDate'),
            }
            for bucket in response.get('Buckets', [])
        ]
        logger.debug(f"区域 {region} 获取到 {len(buckets)} 个 Bucket")
        return buckets
