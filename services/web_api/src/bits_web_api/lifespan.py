"""应用生命周期管理

提供生命周期上下文管理器和服务初始化/关闭函数。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from bits_core.infrastructure.storage.s3_client import close_s3_client, get_s3_client_manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期上下文管理器"""
    app_settings = app.state.settings
    try:
        await init_services(app_settings)
        logger.info("应用程序已启动")
        yield
    except Exception as e:
        error_msg = str(e).lower()
        if "connection" in error_msg or "connect" in error_msg:
            logger.error(f"服务连接失败: {e}")
            logger.error("请检查对象存储服务是否正常运行")
        else:
            logger.error(f"启动失败: {e}")
        raise
    finally:
        await shutdown_services(app_settings)


async def init_services(app_settings) -> None:
    """初始化应用服务"""
    logger.info("=" * 50)
    logger.info(f"启动 {app_settings.APP_NAME} v{app_settings.APP_VERSION}")
    logger.info("=" * 50)

    logger.info("[1/2] 检查制品存储")
    await _init_blobstore(app_settings)

    logger.info("[2/2] 检查签名配置")
    logger.info(f"公网地址: {app_settings.PUBLIC_ENDPOINT}")
    logger.info(f"内网地址: {app_settings.PRIVATE_ENDPOINT}")
    logger.info(f"签名 URL 有效期: {app_settings.SIGNED_URL_EXPIRES}s")

    logger.info("=" * 50)
    logger.info(f"{app_settings.APP_NAME} 初始化完成")
    logger.info("=" * 50)


async def shutdown_services(app_settings) -> None:
    """关闭应用服务"""
    logger.info("正在关闭服务")
    if _uses_s3(app_settings):
        try:
            await close_s3_client(app_settings)
            logger.info("S3 客户端已关闭")
        except Exception as e:
            logger.error(f"关闭 S3 客户端失败: {e}")
    logger.info("应用程序已停止")


def _uses_s3(app_settings) -> bool:
    return app_settings.BLOBSTORE_BACKEND.lower().strip() == "s3"


async def _init_blobstore(app_settings) -> None:
    if not _uses_s3(app_settings):
        logger.info(f"制品存储: 本地文件系统 {app_settings.LOCAL_STORAGE_PATH}")
        return

    if not app_settings.s3_configured:
        raise RuntimeError("BLOBSTORE_BACKEND=s3 但未配置 S3_ACCESS_KEY / S3_SECRET_KEY")

    await get_s3_client_manager(app_settings).ensure_bucket()
    logger.info(f"制品存储: S3 桶 {app_settings.S3_BUCKET}")
