"""进程级环境初始化

init() 在处理任何请求前显式调用一次，重复调用直接返回已初始化的配置。
同一进程中的其他配置（例如测试或多实例）须先经过 prepare() 校验。
"""

import os
import secrets

from loguru import logger

from bits_core.common.config import Settings, settings as default_settings
from bits_core.common.exceptions import ConfigurationError
from bits_core.common.logging import setup_logging
from bits_core.infrastructure.storage.base import RESOURCE_FORM_FIELDS

_settings: Settings | None = None


def init(app_settings: Settings | None = None) -> Settings:
    """初始化日志、签名密钥与存储目录

    Args:
        app_settings: 使用的配置，默认全局 settings

    Returns:
        已初始化的配置

    Raises:
        ConfigurationError: 配置无效，应用无法启动
    """
    global _settings
    if _settings is not None:
        return _settings

    current = app_settings or default_settings
    setup_logging(current)

    logger.info(f"初始化 {current.APP_NAME} v{current.APP_VERSION} (APP_ENV={current.APP_ENV})")
    prepare(current)

    _settings = current
    return current


def prepare(app_settings: Settings) -> Settings:
    """校验配置并准备签名密钥与存储目录，不改动日志

    Raises:
        ConfigurationError: 配置无效
    """
    _init_signing_secret(app_settings)
    _init_storage(app_settings)
    logger.info(f"错误详情输出: {'开启' if app_settings.dump_errors else '关闭'}")
    return app_settings


def is_initialized() -> bool:
    return _settings is not None


def reset() -> None:
    """重置初始化状态（用于测试）"""
    global _settings
    _settings = None


def _init_signing_secret(current: Settings) -> None:
    if current.SIGNING_SECRET:
        return
    if current.is_production:
        raise ConfigurationError("生产环境必须配置 SIGNING_SECRET")
    current.SIGNING_SECRET = secrets.token_hex(32)
    logger.warning("未配置 SIGNING_SECRET，已生成临时签名密钥，重启后签名 URL 将失效")


def _init_storage(current: Settings) -> None:
    backend = current.BLOBSTORE_BACKEND.lower().strip()
    if backend != "local":
        logger.info(f"制品存储后端: {backend}")
        return

    try:
        for resource in RESOURCE_FORM_FIELDS:
            os.makedirs(os.path.join(current.LOCAL_STORAGE_PATH, resource), exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"存储目录初始化失败: {e}") from e

    logger.info(f"制品存储目录已初始化: {current.LOCAL_STORAGE_PATH}")
