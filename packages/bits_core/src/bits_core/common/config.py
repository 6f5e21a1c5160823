"""应用配置模块

提供统一的配置管理，支持环境变量和 .env 文件。
"""

import os
from functools import cached_property
from pathlib import Path
from urllib.parse import urlparse

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_BLOBSTORE_BACKENDS = ("local", "s3")


def _find_project_root() -> Path:
    """查找项目根目录（包含 .env 文件的目录，或最顶层的 pyproject.toml）"""
    current = Path(__file__).resolve()

    for parent in current.parents:
        if (parent / ".env").exists():
            return parent

    # 回退：找最顶层的 pyproject.toml
    root = None
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            root = parent

    if root:
        return root

    return current.parents[5]


class Settings(BaseSettings):
    """应用配置类，使用 cached_property 优化重复计算"""

    # === 运行环境 ===
    APP_ENV: str = Field(default="development")

    # === 服务器配置 ===
    SERVER_HOST: str = Field(default="0.0.0.0")
    SERVER_PORT: int = Field(default=9292)
    SERVER_RELOAD: bool = Field(default=False)

    # === 日志配置 ===
    LOG_LEVEL: str = Field(default="INFO")
    LOG_TO_FILE: bool = Field(default=False)

    # === 应用信息 ===
    APP_NAME: str = "bits-service"
    APP_DESCRIPTION: str = "Buildpack、Droplet、Package 二进制制品存储服务"
    APP_VERSION: str = "1.0.0"

    # === 路径配置 ===
    BASE_DIR: str = Field(default_factory=lambda: str(_find_project_root()))

    @cached_property
    def data_dir(self) -> str:
        """数据目录"""
        return os.path.join(self.BASE_DIR, "data")

    @cached_property
    def LOG_FILE_PATH(self) -> str:
        return os.path.join(self.data_dir, "logs", "bits-service.log")

    @cached_property
    def LOCAL_STORAGE_PATH(self) -> str:
        return os.path.join(self.data_dir, "storage")

    # === 存储配置 ===
    BLOBSTORE_BACKEND: str = Field(default="local")
    MAX_BODY_SIZE: int = 1024 * 1024 * 1024

    # === S3/MinIO 配置（BLOBSTORE_BACKEND=s3 时使用）===
    S3_ENDPOINT_URL: str = Field(default="", validation_alias=AliasChoices("S3_ENDPOINT_URL", "MINIO_ENDPOINT"))
    S3_ACCESS_KEY: str = Field(default="", validation_alias=AliasChoices("S3_ACCESS_KEY", "MINIO_ACCESS_KEY"))
    S3_SECRET_KEY: str = Field(default="", validation_alias=AliasChoices("S3_SECRET_KEY", "MINIO_SECRET_KEY"))
    S3_REGION: str = Field(default="us-east-1")
    S3_BUCKET: str = Field(default="bits", validation_alias=AliasChoices("S3_BUCKET", "MINIO_BUCKET"))

    # === 签名 URL 配置 ===
    PUBLIC_ENDPOINT: str = Field(default="http://public.localhost:9292")
    PRIVATE_ENDPOINT: str = Field(default="http://localhost:9292")
    SIGNING_SECRET: str = Field(default="")
    SIGNING_USERNAME: str = Field(default="admin")
    SIGNING_PASSWORD: str = Field(default="admin")
    SIGNED_URL_EXPIRES: int = Field(default=3600)

    @property
    def is_production(self) -> bool:
        """是否为生产环境"""
        return self.APP_ENV.strip().lower() == "production"

    @property
    def dump_errors(self) -> bool:
        """是否在错误响应中输出异常详情（仅非生产环境）"""
        return not self.is_production

    @property
    def s3_endpoint(self) -> str | None:
        """S3 端点，未带协议时按 http 处理"""
        endpoint = self.S3_ENDPOINT_URL.strip()
        if not endpoint:
            return None
        if not endpoint.startswith(("http://", "https://")):
            return f"http://{endpoint}"
        return endpoint

    @property
    def s3_configured(self) -> bool:
        return bool(self.S3_ACCESS_KEY and self.S3_SECRET_KEY)

    @cached_property
    def public_host(self) -> str:
        """公网访问域名"""
        return urlparse(self.PUBLIC_ENDPOINT).hostname or ""

    model_config = SettingsConfigDict(
        env_file=str(_find_project_root() / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_backend_config(self) -> "Settings":
        """验证存储后端配置"""
        backend = self.BLOBSTORE_BACKEND.lower().strip()
        if backend not in SUPPORTED_BLOBSTORE_BACKENDS:
            raise ValueError(
                f"BLOBSTORE_BACKEND 仅支持 {', '.join(SUPPORTED_BLOBSTORE_BACKENDS)}，当前: {self.BLOBSTORE_BACKEND}"
            )
        if self.MAX_BODY_SIZE <= 0:
            raise ValueError("MAX_BODY_SIZE 必须大于 0")
        return self


# 全局配置实例
settings = Settings()
