"""制品存储后端抽象基类

定义存储后端的统一接口。
"""

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator

from bits_core.common.config import Settings, settings as default_settings
from bits_core.common.exceptions import BlobTooLargeError

# 资源类型 -> 上传表单字段名
RESOURCE_FORM_FIELDS: dict[str, str] = {
    "buildpacks": "buildpack",
    "droplets": "droplet",
    "packages": "package",
    "buildpack_cache": "buildpack_cache",
}


# 分区键使用 guid 前 4 个字符
MIN_GUID_LENGTH = 4


def partitioned_key(guid: str, *parts: str) -> str:
    """按 guid 前缀分区构建存储键: ab/cd/abcd.../parts

    Raises:
        ValueError: guid 不足 4 个字符，分区目录会与其他键冲突
    """
    if len(guid) < MIN_GUID_LENGTH:
        raise ValueError(f"guid 至少 {MIN_GUID_LENGTH} 个字符: {guid!r}")
    return "/".join([guid[0:2], guid[2:4], guid, *parts])


@dataclass
class BlobMetadata:
    """制品元数据"""

    key: str
    size: int
    md5: str
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "size": self.size,
            "md5": self.md5,
            "created_at": self.created_at,
        }


class Blobstore(ABC):
    """制品存储后端抽象基类

    source 参数接受 bytes 或支持 ``await read(n)`` / ``await seek(0)`` 的异步流
    （例如上传的 UploadFile）。
    """

    CHUNK_SIZE = 8 * 1024 * 1024  # 8MB

    def __init__(self, resource: str, max_body_size: int):
        self.resource = resource
        self.max_body_size = max_body_size

    async def calculate_hash(self, source: Any) -> tuple[str, int]:
        """计算 MD5 和大小，超过限制时抛出 BlobTooLargeError"""
        if isinstance(source, (bytes, bytearray)):
            if len(source) > self.max_body_size:
                raise BlobTooLargeError(len(source), self.max_body_size)
            return hashlib.md5(source).hexdigest(), len(source)

        md5_hash = hashlib.md5()
        total_size = 0
        await source.seek(0)

        while chunk := await source.read(self.CHUNK_SIZE):
            total_size += len(chunk)
            if total_size > self.max_body_size:
                raise BlobTooLargeError(total_size, self.max_body_size)
            md5_hash.update(chunk)

        await source.seek(0)
        return md5_hash.hexdigest(), total_size

    @abstractmethod
    async def put(self, key: str, source: Any) -> BlobMetadata:
        """保存制品

        Args:
            key: 存储键
            source: 制品内容

        Returns:
            BlobMetadata 对象
        """

    @abstractmethod
    def open(self, key: str) -> AsyncIterator[bytes]:
        """打开制品，返回异步字节流

        Raises:
            FileNotFoundError: 制品不存在
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """检查制品是否存在"""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """删除制品，返回是否删除了已存在的制品"""

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """删除前缀下的所有制品，返回删除数量"""

    @abstractmethod
    async def copy(self, src_key: str, dst_key: str) -> bool:
        """复制制品，源不存在时返回 False"""

    @abstractmethod
    async def size(self, key: str) -> int:
        """获取制品大小（字节）"""

    @abstractmethod
    def full_path(self, key: str) -> str:
        """获取完整路径"""

    async def presigned_url(self, key: str, expires_in: int) -> str:
        """生成直接下载 URL

        Raises:
            NotImplementedError: 后端不支持预签名 URL
        """
        raise NotImplementedError(f"{type(self).__name__} 不支持预签名 URL")

    def is_s3_backend(self) -> bool:
        return False


# (资源类型, id(Settings)) -> (配置, 存储后端实例)
_blobstores: dict[tuple[str, int], tuple[Settings, Blobstore]] = {}


def get_blobstore(resource: str, app_settings: Settings | None = None) -> Blobstore:
    """工厂方法：根据配置返回资源类型对应的存储后端

    Args:
        resource: 资源类型
        app_settings: 应用配置，默认全局 settings
    """
    app_settings = app_settings or default_settings
    cache_key = (resource, id(app_settings))
    if cache_key in _blobstores:
        return _blobstores[cache_key][1]

    if resource not in RESOURCE_FORM_FIELDS:
        raise ValueError(f"未知的资源类型: {resource}")

    backend_type = app_settings.BLOBSTORE_BACKEND.lower().strip()

    if backend_type == "local":
        from bits_core.infrastructure.storage.local import LocalBlobstore

        store: Blobstore = LocalBlobstore(resource, app_settings.LOCAL_STORAGE_PATH, app_settings.MAX_BODY_SIZE)
    elif backend_type == "s3":
        from bits_core.infrastructure.storage.s3 import S3Blobstore
        from bits_core.infrastructure.storage.s3_client import get_s3_client_manager

        store = S3Blobstore(resource, get_s3_client_manager(app_settings), app_settings.MAX_BODY_SIZE)
    else:
        raise ValueError(f"未知的存储后端: {backend_type}")

    _blobstores[cache_key] = (app_settings, store)
    return store


def reset_blobstores() -> None:
    """重置后端实例"""
    _blobstores.clear()
