"""
配置模块单元测试
"""

import os

import pytest
from pydantic import ValidationError

from bits_core.common.config import Settings


class TestSettings:
    """Settings 测试"""

    def test_default_port(self):
        assert Settings().SERVER_PORT == 9292

    def test_default_max_body_size(self):
        assert Settings().MAX_BODY_SIZE == 1024 * 1024 * 1024

    def test_derived_paths(self, tmp_path):
        """测试派生路径"""
        s = Settings(BASE_DIR=str(tmp_path))

        assert s.data_dir == os.path.join(str(tmp_path), "data")
        assert s.LOCAL_STORAGE_PATH == os.path.join(str(tmp_path), "data", "storage")
        assert s.LOG_FILE_PATH.endswith(os.path.join("logs", "bits-service.log"))

    def test_public_host(self):
        s = Settings(PUBLIC_ENDPOINT="https://bits.example.com:8443")
        assert s.public_host == "bits.example.com"

    @pytest.mark.parametrize("app_env", ["production", "Production", " production "])
    def test_production_hides_errors(self, app_env):
        s = Settings(APP_ENV=app_env)

        assert s.is_production is True
        assert s.dump_errors is False

    @pytest.mark.parametrize("app_env", ["development", "test", ""])
    def test_non_production_dumps_errors(self, app_env):
        s = Settings(APP_ENV=app_env)

        assert s.is_production is False
        assert s.dump_errors is True

    def test_invalid_backend(self):
        with pytest.raises(ValidationError):
            Settings(BLOBSTORE_BACKEND="ftp")

    def test_invalid_max_body_size(self):
        with pytest.raises(ValidationError):
            Settings(MAX_BODY_SIZE=0)

    def test_backend_case_insensitive(self):
        assert Settings(BLOBSTORE_BACKEND="S3").BLOBSTORE_BACKEND == "S3"


class TestS3Settings:
    """S3 连接配置"""

    def test_defaults(self):
        s = Settings()

        assert s.S3_BUCKET == "bits"
        assert s.S3_REGION == "us-east-1"
        assert s.s3_configured is False

    def test_endpoint_without_scheme(self):
        assert Settings(S3_ENDPOINT_URL="minio:9000").s3_endpoint == "http://minio:9000"

    def test_empty_endpoint(self):
        assert Settings(S3_ENDPOINT_URL="").s3_endpoint is None

    def test_minio_env_names(self, monkeypatch):
        monkeypatch.setenv("MINIO_ENDPOINT", "https://minio.internal")
        monkeypatch.setenv("MINIO_ACCESS_KEY", "minio")
        monkeypatch.setenv("MINIO_SECRET_KEY", "minio123")
        monkeypatch.setenv("MINIO_BUCKET", "artifacts")

        s = Settings()

        assert s.s3_endpoint == "https://minio.internal"
        assert s.S3_BUCKET == "artifacts"
        assert s.s3_configured is True
