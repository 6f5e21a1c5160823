"""S3/MinIO 制品存储后端

提供 S3 兼容的对象存储后端实现。
所有资源类型共用一个桶，以资源类型作为键前缀。
"""

from datetime import datetime
from typing import Any, AsyncIterator

from botocore.exceptions import ClientError
from loguru import logger

from bits_core.infrastructure.storage.base import BlobMetadata, Blobstore
from bits_core.infrastructure.storage.s3_client import S3ClientManager

MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _is_missing(error: Exception) -> bool:
    return isinstance(error, ClientError) and error.response.get("Error", {}).get("Code") in MISSING_CODES


class S3Blobstore(Blobstore):
    """S3/MinIO 制品存储后端"""

    def __init__(self, resource: str, client_manager: S3ClientManager, max_body_size: int):
        super().__init__(resource, max_body_size)
        self.client_manager = client_manager
        self.bucket = client_manager.bucket

    async def _get_client(self):
        return await self.client_manager.get_client()

    def _object_key(self, key: str) -> str:
        return f"{self.resource}/{key}"

    def full_path(self, key: str) -> str:
        return f"s3://{self.bucket}/{self._object_key(key)}"

    async def put(self, key: str, source: Any) -> BlobMetadata:
        md5, size = await self.calculate_hash(source)

        try:
            client = await self._get_client()
            if isinstance(source, (bytes, bytearray)):
                content = bytes(source)
            else:
                await source.seek(0)
                content = await source.read()

            await client.put_object(
                Bucket=self.bucket,
                Key=self._object_key(key),
                Body=content,
            )
            logger.debug(f"制品已上传到 S3: {self.full_path(key)}")
        except Exception as e:
            logger.error(f"S3 上传失败: {e}")
            raise IOError(f"保存失败: {e}") from e

        return BlobMetadata(
            key=key,
            size=size,
            md5=md5,
            created_at=datetime.now().isoformat(),
        )

    async def open(self, key: str) -> AsyncIterator[bytes]:
        try:
            client = await self._get_client()
            response = await client.get_object(Bucket=self.bucket, Key=self._object_key(key))
        except Exception as e:
            if _is_missing(e):
                raise FileNotFoundError(f"文件不存在: {key}") from e
            raise IOError(f"读取失败: {e}") from e

        async with response["Body"] as stream:
            while chunk := await stream.read(self.CHUNK_SIZE):
                yield chunk

    async def exists(self, key: str) -> bool:
        try:
            client = await self._get_client()
            await client.head_object(Bucket=self.bucket, Key=self._object_key(key))
            return True
        except Exception as e:
            if _is_missing(e):
                return False
            raise IOError(f"查询失败: {e}") from e

    async def delete(self, key: str) -> bool:
        if not await self.exists(key):
            return False
        client = await self._get_client()
        await client.delete_object(Bucket=self.bucket, Key=self._object_key(key))
        logger.debug(f"制品已从 S3 删除: {self.full_path(key)}")
        return True

    async def delete_prefix(self, prefix: str) -> int:
        object_prefix = self._object_key(f"{prefix.rstrip('/')}/") if prefix else f"{self.resource}/"
        return await self.client_manager.delete_prefix(object_prefix)

    async def copy(self, src_key: str, dst_key: str) -> bool:
        if not await self.exists(src_key):
            return False
        client = await self._get_client()
        await client.copy_object(
            Bucket=self.bucket,
            Key=self._object_key(dst_key),
            CopySource={"Bucket": self.bucket, "Key": self._object_key(src_key)},
        )
        return True

    async def size(self, key: str) -> int:
        try:
            client = await self._get_client()
            response = await client.head_object(Bucket=self.bucket, Key=self._object_key(key))
            return response.get("ContentLength", 0)
        except Exception as e:
            if _is_missing(e):
                raise FileNotFoundError(f"文件不存在: {key}") from e
            raise IOError(f"获取文件大小失败: {e}") from e

    async def presigned_url(self, key: str, expires_in: int) -> str:
        try:
            client = await self._get_client()
            return await client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": self._object_key(key)},
                ExpiresIn=expires_in,
            )
        except Exception as e:
            raise IOError(f"生成预签名 URL 失败: {e}") from e

    def is_s3_backend(self) -> bool:
        return True
