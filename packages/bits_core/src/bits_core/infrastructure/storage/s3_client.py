"""S3/MinIO 连接

每份配置对应一个 S3ClientManager，所有资源类型共用同一个桶和客户端，
资源之间以键前缀 ``{resource}/`` 区分。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from botocore.exceptions import ClientError
from loguru import logger

from bits_core.common.config import Settings

if TYPE_CHECKING:
    from types_aiobotocore_s3 import S3Client

# 批量删除单次上限
DELETE_BATCH = 1000


class S3ClientManager:
    """桶级 S3 客户端，按需创建并长期复用"""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None,
        access_key: str,
        secret_key: str,
        region: str,
    ):
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self._client_cm = None
        self._client: S3Client | None = None

    @classmethod
    def from_settings(cls, app_settings: Settings) -> S3ClientManager:
        return cls(
            bucket=app_settings.S3_BUCKET,
            endpoint_url=app_settings.s3_endpoint,
            access_key=app_settings.S3_ACCESS_KEY,
            secret_key=app_settings.S3_SECRET_KEY,
            region=app_settings.S3_REGION,
        )

    async def get_client(self) -> S3Client:
        """获取 S3 客户端

        Raises:
            RuntimeError: 未配置访问凭据
        """
        if self._client is not None:
            return self._client

        if not (self.access_key and self.secret_key):
            raise RuntimeError("S3 未配置，请设置 S3_ACCESS_KEY 和 S3_SECRET_KEY")

        import aioboto3

        self._client_cm = aioboto3.Session().client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region,
        )
        self._client = await self._client_cm.__aenter__()
        logger.debug(f"S3 客户端已连接: {self.endpoint_url or 'aws'} bucket={self.bucket}")
        return self._client

    async def ensure_bucket(self) -> None:
        """桶不存在时创建"""
        client = await self.get_client()
        try:
            await client.head_bucket(Bucket=self.bucket)
            return
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in {"404", "NoSuchBucket", "NotFound"}:
                raise

        try:
            await client.create_bucket(Bucket=self.bucket)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "BucketAlreadyOwnedByYou":
                raise
        logger.info(f"已创建 S3 桶: {self.bucket}")

    async def delete_prefix(self, prefix: str) -> int:
        """删除前缀下的全部对象，返回删除数量"""
        client = await self.get_client()
        keys = []
        paginator = client.get_paginator("list_objects_v2")
        async for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            keys.extend({"Key": obj["Key"]} for obj in page.get("Contents", []))

        for start in range(0, len(keys), DELETE_BATCH):
            await client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": keys[start:start + DELETE_BATCH]},
            )

        logger.info(f"已删除 s3://{self.bucket}/{prefix} 下 {len(keys)} 个对象")
        return len(keys)

    async def close(self) -> None:
        if self._client_cm is None:
            return
        try:
            await self._client_cm.__aexit__(None, None, None)
        finally:
            self._client = None
            self._client_cm = None


# id(Settings) -> (配置, 管理器)，持有配置引用以保证 id 不被复用
_managers: dict[int, tuple[Settings, S3ClientManager]] = {}


def get_s3_client_manager(app_settings: Settings) -> S3ClientManager:
    key = id(app_settings)
    if key not in _managers:
        _managers[key] = (app_settings, S3ClientManager.from_settings(app_settings))
    return _managers[key][1]


async def close_s3_client(app_settings: Settings) -> None:
    """关闭并移除配置对应的 S3 连接"""
    entry = _managers.pop(id(app_settings), None)
    if entry is not None:
        await entry[1].close()
