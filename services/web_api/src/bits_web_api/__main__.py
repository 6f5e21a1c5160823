"""bits-service 启动入口: python -m bits_web_api"""

import uvicorn

from bits_core.common.config import settings


def main():
    # 访问日志由 AccessLogMiddleware 输出
    uvicorn.run(
        "bits_web_api.app_factory:create_app",
        factory=True,
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.SERVER_RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
