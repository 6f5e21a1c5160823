"""集成测试 HTTP 客户端

对本地运行的 bits-service 发起 GET/PUT 请求。
传输错误与 HTTP 错误状态都不会抛给调用方，而是转换为显式的结果对象：

- Success(response): 请求成功
- Failure(error, response): 请求失败，response 为错误携带的响应，
  连接被拒绝、超时等传输错误以及无法解析的 URL 没有响应，此时为 None
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

import httpx
from loguru import logger

DEFAULT_ENDPOINT = "http://localhost:9292"


@dataclass(frozen=True)
class Success:
    """请求成功"""

    response: httpx.Response

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> httpx.Response:
        return self.response


@dataclass(frozen=True)
class Failure:
    """请求失败，可能携带部分响应"""

    error: httpx.HTTPError | httpx.InvalidURL
    response: httpx.Response | None = None

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> httpx.Response:
        """返回错误携带的响应，没有响应时抛出原始错误"""
        if self.response is None:
            raise self.error
        return self.response


HttpResult = Union[Success, Failure]


class IntegrationHttpClient:
    """集成测试 HTTP 客户端，每次调用只发送一次请求，不重试"""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self._client = httpx.Client(transport=transport, trust_env=False)

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.endpoint}{path}"

    def get(self, path: str, **kwargs: Any) -> HttpResult:
        """GET 请求"""
        return self._request("GET", path, **kwargs)

    def put(self, path: str, body: Any, **kwargs: Any) -> HttpResult:
        """PUT 请求

        bytes/str 原样作为请求体发送；Mapping 作为 multipart 文件上传。
        """
        if isinstance(body, Mapping):
            kwargs["files"] = body
        else:
            kwargs["content"] = body
        return self._request("PUT", path, **kwargs)

    def _request(self, method: str, path: str, **kwargs: Any) -> HttpResult:
        url = self.url_for(path)
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.debug(f"{method} {url} 返回错误状态: {e.response.status_code}")
            return Failure(error=e, response=e.response)
        except httpx.InvalidURL as e:
            logger.debug(f"{method} {url!r} URL 无效: {e}")
            return Failure(error=e, response=None)
        except httpx.HTTPError as e:
            logger.debug(f"{method} {url} 请求失败: {e!r}")
            return Failure(error=e, response=None)
        return Success(response=response)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> IntegrationHttpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


_integration_http: IntegrationHttpClient | None = None


def get_integration_http() -> IntegrationHttpClient:
    """获取默认端点的共享客户端"""
    global _integration_http
    if _integration_http is None:
        _integration_http = IntegrationHttpClient()
    return _integration_http


def make_get_request(path: str) -> HttpResult:
    """向本地服务发送 GET 请求"""
    return get_integration_http().get(path)


def make_put_request(path: str, body: Any) -> HttpResult:
    """向本地服务发送 PUT 请求"""
    return get_integration_http().put(path, body)
