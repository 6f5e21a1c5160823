"""
通用 Schema

错误响应与制品元数据响应模式。
"""

from datetime import datetime

from pydantic import BaseModel, Field

# 存储键按 guid 前 4 个字符分区，前缀中不允许出现 "."
GUID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]{3}[A-Za-z0-9_.-]*$"
# stack 名称只作为键的最后一段
STACK_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"


class ErrorDetail(BaseModel):
    """错误详情"""
    field: str
    message: str


class ErrorResponse(BaseModel):
    """错误响应模型"""
    success: bool = Field(default=False)
    code: int
    message: str
    errors: list[ErrorDetail] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)


class BlobResponse(BaseModel):
    """制品元数据响应"""
    guid: str
    key: str
    size: int
    md5: str
    created_at: str | None = None


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str
    version: str
    timestamp: str


class CopyPackageRequest(BaseModel):
    """复制 package 请求"""
    source_guid: str = Field(..., max_length=255, pattern=GUID_PATTERN)


__all__ = [
    "GUID_PATTERN",
    "STACK_PATTERN",
    "ErrorDetail",
    "ErrorResponse",
    "BlobResponse",
    "HealthResponse",
    "CopyPackageRequest",
]
