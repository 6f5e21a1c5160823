"""
Common 模块

通用功能：
- config: 配置管理
- logging: 日志配置
- exceptions: 异常定义
- signing: 签名 URL
"""

from bits_core.common.config import Settings, settings
from bits_core.common.exceptions import (
    BitsServiceException,
    BlobTooLargeError,
    ConfigurationError,
    NotFoundError,
    SignatureError,
    StorageError,
)
from bits_core.common.logging import setup_logging
from bits_core.common.signing import UrlSigner, compute_signature

__all__ = [
    "Settings",
    "settings",
    "BitsServiceException",
    "BlobTooLargeError",
    "ConfigurationError",
    "NotFoundError",
    "SignatureError",
    "StorageError",
    "setup_logging",
    "UrlSigner",
    "compute_signature",
]
