"""
Storage 模块

制品存储：
- base: 存储后端抽象接口与工厂
- local: 本地文件存储后端
- s3: S3/MinIO 存储后端
- s3_client: 按配置复用的 S3 连接
"""

from bits_core.infrastructure.storage.base import (
    RESOURCE_FORM_FIELDS,
    BlobMetadata,
    Blobstore,
    get_blobstore,
    partitioned_key,
    reset_blobstores,
)
from bits_core.infrastructure.storage.local import LocalBlobstore
from bits_core.infrastructure.storage.s3 import S3Blobstore
from bits_core.infrastructure.storage.s3_client import (
    S3ClientManager,
    close_s3_client,
    get_s3_client_manager,
)

__all__ = [
    "RESOURCE_FORM_FIELDS",
    "BlobMetadata",
    "Blobstore",
    "get_blobstore",
    "partitioned_key",
    "reset_blobstores",
    "LocalBlobstore",
    "S3Blobstore",
    "S3ClientManager",
    "close_s3_client",
    "get_s3_client_manager",
]
