"""应用工厂模块。

提供 create_app() 工厂函数，用于创建 FastAPI 应用实例。
"""

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from bits_core import environment
from bits_core.common.config import Settings
from bits_core.common.exceptions import BitsServiceException
from bits_web_api.exceptions import (
    BusinessException,
    business_exception_handler,
    core_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from bits_web_api.lifespan import lifespan
from bits_web_api.middleware import make_middlewares


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """创建并配置 FastAPI 应用。

    Args:
        app_settings: 应用配置，默认使用进程初始化时的全局配置。

    Returns:
        FastAPI: 已配置的应用实例。

    Raises:
        ConfigurationError: 配置无效
    """
    current = environment.init(app_settings)
    if app_settings is not None and app_settings is not current:
        current = environment.prepare(app_settings)
    from bits_web_api.routes import register_routes

    app = FastAPI(
        title=current.APP_NAME,
        version=current.APP_VERSION,
        description=current.APP_DESCRIPTION,
        middleware=make_middlewares(),
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = current

    # 注册异常处理器
    app.add_exception_handler(BusinessException, business_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BitsServiceException, core_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # 注册路由
    register_routes(app)

    return app
