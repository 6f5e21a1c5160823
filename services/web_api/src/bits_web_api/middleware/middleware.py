"""中间件组件"""

import time

from fastapi import status
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from bits_core.common.exceptions import SignatureError
from bits_core.common.signing import SIGNED_PREFIX, UrlSigner
from bits_web_api.exceptions import create_error_response


class SignedUrlMiddleware(BaseHTTPMiddleware):
    """签名 URL 中间件

    - /signed/... 请求校验签名，通过后转发到去掉前缀的路径
    - 公网域名上的其他请求一律拒绝
    """

    # 请求方法 -> 签名动词
    METHOD_VERBS = {"GET": "get", "HEAD": "get", "PUT": "put"}

    async def dispatch(self, request, call_next):
        app_settings = request.app.state.settings
        path = request.url.path

        if path == SIGNED_PREFIX or path.startswith(f"{SIGNED_PREFIX}/"):
            target = path[len(SIGNED_PREFIX):] or "/"
            verb = self.METHOD_VERBS.get(request.method)
            if verb is None:
                return self._forbidden(f"签名 URL 不支持 {request.method}")

            signer = UrlSigner(
                secret=app_settings.SIGNING_SECRET,
                public_endpoint=app_settings.PUBLIC_ENDPOINT,
                expires_in=app_settings.SIGNED_URL_EXPIRES,
            )
            try:
                signer.verify(
                    target,
                    md5=request.query_params.get("md5"),
                    expires=request.query_params.get("expires"),
                    verb=verb,
                )
            except SignatureError as e:
                logger.warning(f"签名校验失败: {request.method} {path} - {e.message}")
                return self._forbidden(e.message)

            request.scope["path"] = target
            request.scope["raw_path"] = target.encode("utf-8")
            return await call_next(request)

        if app_settings.public_host and request.url.hostname == app_settings.public_host:
            return self._forbidden("公网访问需要签名 URL")

        return await call_next(request)

    @staticmethod
    def _forbidden(message: str):
        return create_error_response(
            status_code=status.HTTP_403_FORBIDDEN,
            message=message,
            error_code="INVALID_SIGNATURE",
        )


class AccessLogMiddleware(BaseHTTPMiddleware):
    """访问日志中间件"""

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
        )
        return response


def make_middlewares():
    """Create middleware list for FastAPI application.

    Returns:
        list: List of Middleware instances, outermost first.
    """
    from fastapi.middleware import Middleware

    return [
        Middleware(AccessLogMiddleware),
        Middleware(SignedUrlMiddleware),
    ]
