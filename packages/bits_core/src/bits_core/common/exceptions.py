"""
bits-service 异常模块

仅包含与 HTTP 无关的异常定义。
"""

from __future__ import annotations

# =============================================================================
# 基础异常类
# =============================================================================


class BitsServiceException(Exception):
    """bits-service 异常基类"""

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(BitsServiceException):
    """配置错误异常"""

    def __init__(self, message: str):
        super().__init__(message, error_code="CONFIGURATION_ERROR")


class NotFoundError(BitsServiceException):
    """资源不存在异常"""

    def __init__(self, resource: str, identifier: str | None = None):
        self.resource = resource
        self.identifier = identifier
        message = f"{resource} 不存在"
        if identifier:
            message = f"{resource} {identifier} 不存在"
        super().__init__(message, error_code="NOT_FOUND")


# =============================================================================
# 存储异常
# =============================================================================


class StorageError(BitsServiceException):
    """存储错误"""

    def __init__(self, message: str):
        super().__init__(message, error_code="STORAGE_ERROR")


class BlobTooLargeError(StorageError):
    """制品超过大小限制"""

    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(f"文件大小 {size} 字节超过限制 {max_size} 字节")
        self.error_code = "BLOB_TOO_LARGE"


# =============================================================================
# 签名异常
# =============================================================================


class SignatureError(BitsServiceException):
    """签名 URL 校验失败"""

    def __init__(self, message: str = "签名无效"):
        super().__init__(message, error_code="INVALID_SIGNATURE")
