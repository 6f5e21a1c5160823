"""
Web API 异常模块

包含 HTTP 相关异常与响应处理，仅供 web_api 使用。
"""

from __future__ import annotations

import traceback
from datetime import datetime
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from bits_core.common.exceptions import (
    BitsServiceException,
    BlobTooLargeError,
    NotFoundError,
    SignatureError,
)
from bits_web_api.schemas import ErrorDetail, ErrorResponse


class BusinessException(HTTPException):
    """业务异常基类"""

    def __init__(self, status_code: int, detail: str, error_code: str | None = None, errors: list | None = None):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code
        self.errors = errors or []


class ResourceNotFoundException(BusinessException):
    def __init__(self, resource: str, guid: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} {guid} 不存在",
            error_code="NOT_FOUND",
        )


class MissingUploadException(BusinessException):
    def __init__(self, field: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"缺少上传文件字段 '{field}'",
            error_code="MISSING_UPLOAD",
            errors=[{"field": field, "message": "必须提供文件"}],
        )


class BlobTooLargeException(BusinessException):
    def __init__(self, max_size: int):
        super().__init__(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"文件超过大小限制 {max_size} 字节",
            error_code="BLOB_TOO_LARGE",
        )


class StorageException(BusinessException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"存储错误: {detail}",
            error_code="STORAGE_ERROR",
        )


def create_error_response(
    status_code: int,
    message: str,
    errors: list[dict[str, Any]] | list[ErrorDetail] | None = None,
    error_code: str | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    """创建统一的错误响应"""
    error_details: list[ErrorDetail] = []
    if errors:
        for err in errors:
            if isinstance(err, dict):
                error_details.append(
                    ErrorDetail(
                        field=err.get("field", ""),
                        message=err.get("message", str(err)),
                    )
                )
            elif isinstance(err, ErrorDetail):
                error_details.append(err)

    resp = ErrorResponse(
        code=status_code,
        message=message,
        errors=error_details,
        timestamp=datetime.now(),
    )
    content = resp.model_dump(mode="json")
    if error_code:
        content["error_code"] = error_code
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
    """处理业务异常"""
    return create_error_response(
        status_code=exc.status_code,
        message=exc.detail,
        errors=getattr(exc, "errors", None),
        error_code=getattr(exc, "error_code", None),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """处理 HTTP 异常"""
    response = create_error_response(status_code=exc.status_code, message=str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc) -> JSONResponse:
    """处理请求验证异常"""
    errors: list[dict[str, Any]] = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", []))
        errors.append(
            {
                "field": field,
                "message": error.get("msg", "验证失败"),
            }
        )
    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="请求参数验证失败",
        errors=errors,
    )


# 核心异常 -> HTTP 状态码，未列出的为 500
CORE_EXCEPTION_STATUS: dict[type[BitsServiceException], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    BlobTooLargeError: status.HTTP_413_CONTENT_TOO_LARGE,
    SignatureError: status.HTTP_403_FORBIDDEN,
}


async def core_exception_handler(request: Request, exc: BitsServiceException) -> JSONResponse:
    """处理未在路由中转换的核心异常"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type, code in CORE_EXCEPTION_STATUS.items():
        if isinstance(exc, exc_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 失败: {exc.message}")
    return create_error_response(
        status_code=status_code,
        message=exc.message,
        error_code=exc.error_code,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """处理未捕获的异常

    非生产环境输出异常类型、消息与堆栈，生产环境只返回通用消息。
    """
    if request.app.state.settings.dump_errors:
        logger.exception("未处理异常: {}", exc)
        return create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="服务器内部错误",
            extra={
                "exception": type(exc).__name__,
                "detail": str(exc),
                "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
            },
        )

    logger.error(f"未处理异常: {type(exc).__name__} {request.method} {request.url.path}")
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="服务器内部错误",
    )
