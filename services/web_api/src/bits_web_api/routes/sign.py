"""签名 URL 接口

内部调用方通过 Basic 认证获取公网可用的签名 URL。
"""

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse
from loguru import logger

from bits_core.common.signing import SUPPORTED_VERBS
from bits_web_api.deps import Signer, SigningUser

router = APIRouter()

VERB_PATTERN = "^(" + "|".join(SUPPORTED_VERBS) + ")$"


@router.get("/sign/{path:path}", response_class=PlainTextResponse, summary="生成签名 URL")
async def sign_url(
    path: str,
    user: SigningUser,
    signer: Signer,
    verb: str = Query("get", pattern=VERB_PATTERN),
):
    signed = signer.sign(f"/{path.lstrip('/')}", verb=verb)
    logger.debug(f"{user} 生成签名 URL: {verb.upper()} /{path.lstrip('/')}")
    return PlainTextResponse(signed)
