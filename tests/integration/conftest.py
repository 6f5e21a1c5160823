import pytest

from bits_core.common.utils.http_client import DEFAULT_ENDPOINT, Failure, make_get_request


def _server_reachable() -> bool:
    result = make_get_request("/health")
    return not (isinstance(result, Failure) and result.response is None)


@pytest.fixture(scope="session")
def bits_server():
    """本地运行的 bits-service，未启动时跳过"""
    if not _server_reachable():
        pytest.skip(f"bits-service 未在 {DEFAULT_ENDPOINT} 运行")
    return DEFAULT_ENDPOINT
