"""中间件基础设施模块"""

from bits_web_api.middleware.middleware import (
    AccessLogMiddleware,
    SignedUrlMiddleware,
    make_middlewares,
)

__all__ = [
    "AccessLogMiddleware",
    "SignedUrlMiddleware",
    "make_middlewares",
]
