"""
依赖注入模块

提供 FastAPI 路由的依赖注入函数
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from bits_core.common.config import Settings
from bits_core.common.signing import UrlSigner, constant_time_compare

# HTTP Basic 认证方案（签名接口）
security = HTTPBasic()


def get_settings(request: Request) -> Settings:
    """获取应用配置"""
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_settings)]


def get_url_signer(app_settings: AppSettings) -> UrlSigner:
    """获取签名 URL 生成器"""
    return UrlSigner(
        secret=app_settings.SIGNING_SECRET,
        public_endpoint=app_settings.PUBLIC_ENDPOINT,
        expires_in=app_settings.SIGNED_URL_EXPIRES,
    )


def verify_signing_credentials(
    credentials: Annotated[HTTPBasicCredentials, Depends(security)],
    app_settings: AppSettings,
) -> str:
    """校验签名接口的 Basic 认证

    Raises:
        HTTPException: 认证失败时抛出 401
    """
    valid_username = constant_time_compare(credentials.username, app_settings.SIGNING_USERNAME)
    valid_password = constant_time_compare(credentials.password, app_settings.SIGNING_PASSWORD)
    if not (valid_username and valid_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="认证失败",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


SigningUser = Annotated[str, Depends(verify_signing_credentials)]
Signer = Annotated[UrlSigner, Depends(get_url_signer)]
