"""
bits-service 集成测试

对 localhost:9292 上运行的服务发起真实请求：
    python -m bits_web_api
    pytest tests/integration
"""

import hashlib
import uuid

import httpx
import pytest

from bits_core.common.utils.http_client import Failure, Success, make_get_request, make_put_request

pytestmark = pytest.mark.usefixtures("bits_server")


@pytest.fixture
def guid():
    return uuid.uuid4().hex


def test_health():
    result = make_get_request("/health")

    assert isinstance(result, Success)
    assert result.response.json()["status"] == "healthy"


def test_buildpack_upload_and_download(guid):
    content = b"integration buildpack " + guid.encode()

    upload = make_put_request(f"/buildpacks/{guid}", {"buildpack": ("bp.zip", content)})

    assert isinstance(upload, Success)
    assert upload.response.status_code == 201
    assert upload.response.json()["md5"] == hashlib.md5(content).hexdigest()

    download = make_get_request(f"/buildpacks/{guid}")
    assert isinstance(download, Success)
    assert download.response.content == content


def test_missing_buildpack_is_failure_with_response(guid):
    result = make_get_request(f"/buildpacks/{guid}")

    assert isinstance(result, Failure)
    assert isinstance(result.error, httpx.HTTPStatusError)
    assert result.response.status_code == 404


def test_upload_without_field_is_rejected(guid):
    result = make_put_request(f"/droplets/{guid}", b"raw body without multipart")

    assert isinstance(result, Failure)
    assert result.response.status_code == 400


def test_unreachable_server_is_failure_without_response():
    from bits_core.common.utils.http_client import IntegrationHttpClient

    with IntegrationHttpClient(endpoint="http://127.0.0.1:1") as client:
        result = client.get("/health")

    assert isinstance(result, Failure)
    assert result.response is None
    with pytest.raises(httpx.TransportError):
        result.unwrap()
