"""
测试公共配置

在导入 bits_core 之前设置环境变量，数据目录指向临时目录。
"""

import os
import shutil
import tempfile

import pytest

_TEST_BASE_DIR = tempfile.mkdtemp(prefix="bits-service-test-")

os.environ["BASE_DIR"] = _TEST_BASE_DIR
os.environ["APP_ENV"] = "test"
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BLOBSTORE_BACKEND"] = "local"
os.environ["SIGNING_SECRET"] = "test-signing-secret"
os.environ["SIGNING_USERNAME"] = "admin"
os.environ["SIGNING_PASSWORD"] = "admin"
os.environ["PUBLIC_ENDPOINT"] = "http://public.localhost:9292"


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_TEST_BASE_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_blobstores():
    """每个测试使用干净的存储目录和后端实例"""
    from bits_core.common.config import settings
    from bits_core.infrastructure.storage import reset_blobstores

    reset_blobstores()
    yield
    reset_blobstores()
    shutil.rmtree(settings.LOCAL_STORAGE_PATH, ignore_errors=True)


@pytest.fixture
def app():
    from bits_core import environment
    from bits_web_api.app_factory import create_app

    environment.reset()
    yield create_app()
    environment.reset()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
