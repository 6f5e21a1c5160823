"""工具模块"""

from bits_core.common.utils.http_client import (
    DEFAULT_ENDPOINT,
    Failure,
    HttpResult,
    IntegrationHttpClient,
    Success,
    get_integration_http,
    make_get_request,
    make_put_request,
)

__all__ = [
    "DEFAULT_ENDPOINT",
    "Failure",
    "HttpResult",
    "IntegrationHttpClient",
    "Success",
    "get_integration_http",
    "make_get_request",
    "make_put_request",
]
