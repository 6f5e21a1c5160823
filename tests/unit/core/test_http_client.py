"""
集成测试 HTTP 客户端单元测试

使用 httpx.MockTransport 模拟服务端。
"""

import httpx
import pytest

from bits_core.common.utils.http_client import (
    DEFAULT_ENDPOINT,
    Failure,
    IntegrationHttpClient,
    Success,
)


def _client(handler) -> IntegrationHttpClient:
    return IntegrationHttpClient(transport=httpx.MockTransport(handler))


class TestIntegrationHttpClient:
    """IntegrationHttpClient 测试"""

    def test_default_endpoint(self):
        assert DEFAULT_ENDPOINT == "http://localhost:9292"
        with IntegrationHttpClient() as client:
            assert client.url_for("/buildpacks/abc") == "http://localhost:9292/buildpacks/abc"

    def test_get_success(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"blob")

        with _client(handler) as client:
            result = client.get("/buildpacks/abc")

        assert isinstance(result, Success)
        assert result.ok is True
        assert result.response.content == b"blob"
        assert result.unwrap() is result.response
        assert seen[0].method == "GET"
        assert str(seen[0].url) == "http://localhost:9292/buildpacks/abc"

    def test_get_http_error_keeps_response(self):
        """错误状态码转换为携带响应的 Failure"""
        with _client(lambda request: httpx.Response(404, json={"message": "not found"})) as client:
            result = client.get("/buildpacks/missing")

        assert isinstance(result, Failure)
        assert result.ok is False
        assert isinstance(result.error, httpx.HTTPStatusError)
        assert result.response is not None
        assert result.response.status_code == 404
        assert result.unwrap().json() == {"message": "not found"}

    def test_server_error(self):
        with _client(lambda request: httpx.Response(500)) as client:
            result = client.put("/droplets/abc", b"data")

        assert isinstance(result, Failure)
        assert result.response.status_code == 500

    def test_transport_error_has_no_response(self):
        """连接失败时 Failure 不携带响应"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            result = client.get("/buildpacks/abc")

        assert isinstance(result, Failure)
        assert result.response is None
        assert isinstance(result.error, httpx.ConnectError)
        with pytest.raises(httpx.ConnectError):
            result.unwrap()

    def test_put_bytes_sent_unmodified(self):
        received = {}

        def handler(request: httpx.Request) -> httpx.Response:
            received["method"] = request.method
            received["body"] = request.content
            return httpx.Response(201)

        with _client(handler) as client:
            result = client.put("/packages/abc", b"\x00\x01raw")

        assert result.ok is True
        assert received == {"method": "PUT", "body": b"\x00\x01raw"}

    def test_put_mapping_as_multipart(self):
        received = {}

        def handler(request: httpx.Request) -> httpx.Response:
            received["content_type"] = request.headers["content-type"]
            received["body"] = request.content
            return httpx.Response(201)

        with _client(handler) as client:
            client.put("/buildpacks/abc", {"buildpack": ("bp.zip", b"zipdata")})

        assert received["content_type"].startswith("multipart/form-data")
        assert b'name="buildpack"' in received["body"]
        assert b"zipdata" in received["body"]

    def test_single_request_no_retry(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        with _client(handler) as client:
            client.get("/buildpacks/abc")

        assert len(calls) == 1

    def test_redirect_not_followed(self):
        """302 不自动跟随，按非成功状态返回"""
        with _client(lambda request: httpx.Response(302, headers={"Location": "http://s3/x"})) as client:
            result = client.get("/droplets/abc")

        assert isinstance(result, Failure)
        assert result.response.status_code == 302

    def test_relative_path_gets_leading_slash(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        with _client(handler) as client:
            result = client.get("buildpacks/abcd")

        assert result.ok is True
        assert str(seen[0].url) == "http://localhost:9292/buildpacks/abcd"

    def test_invalid_url_becomes_failure(self):
        """无法解析的 URL 不抛出，返回无响应的 Failure"""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        with _client(handler) as client:
            result = client.get("/a\x00b")

        assert isinstance(result, Failure)
        assert result.response is None
        assert isinstance(result.error, httpx.InvalidURL)
        assert calls == []
        with pytest.raises(httpx.InvalidURL):
            result.unwrap()
