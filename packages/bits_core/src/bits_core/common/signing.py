"""
签名 URL 工具

GET 签名与 nginx secure_link 模块一致:
1. 构建签名字符串: "{expires}{path} {secret}"
2. 计算 MD5 摘要
3. URL 安全的 Base64 编码并去掉填充 "="

其他动词（PUT）在路径前加上大写动词: "{expires}PUT{path} {secret}"，
GET 签名的 URL 不能用于上传。
"""

import base64
import hashlib
import hmac
import time
from urllib.parse import urlencode

from bits_core.common.exceptions import SignatureError

SIGNED_PREFIX = "/signed"
SUPPORTED_VERBS = ("get", "put")


def compute_signature(path: str, expires: int, secret: str, verb: str = "get") -> str:
    """计算路径签名"""
    verb = verb.lower()
    prefix = "" if verb == "get" else verb.upper()
    digest = hashlib.md5(f"{expires}{prefix}{path} {secret}".encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def constant_time_compare(a: str, b: str) -> bool:
    """常量时间字符串比较，防止时序攻击"""
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class UrlSigner:
    """签名 URL 生成与校验"""

    def __init__(self, secret: str, public_endpoint: str, expires_in: int = 3600):
        if not secret:
            raise ValueError("签名密钥不能为空")
        self.secret = secret
        self.public_endpoint = public_endpoint.rstrip("/")
        self.expires_in = expires_in

    @staticmethod
    def _normalize(path: str) -> str:
        return "/" + path.lstrip("/")

    def sign(self, path: str, verb: str = "get", now: int | None = None) -> str:
        """为资源路径生成公网签名 URL

        Args:
            path: 资源路径，例如 /buildpacks/{guid}
            verb: 允许的动词，get 或 put
            now: 当前时间戳（测试用）

        Returns:
            {PUBLIC_ENDPOINT}/signed{path}?md5=...&expires=...
        """
        verb = verb.lower()
        if verb not in SUPPORTED_VERBS:
            raise ValueError(f"不支持的动词: {verb}")

        path = self._normalize(path)
        expires = int(now if now is not None else time.time()) + self.expires_in
        params = {"md5": compute_signature(path, expires, self.secret, verb), "expires": expires}
        if verb != "get":
            params["verb"] = verb
        return f"{self.public_endpoint}{SIGNED_PREFIX}{path}?{urlencode(params)}"

    def verify(
        self,
        path: str,
        md5: str | None,
        expires: str | None,
        verb: str = "get",
        now: int | None = None,
    ) -> None:
        """校验签名，失败时抛出 SignatureError"""
        if not md5 or not expires:
            raise SignatureError("缺少签名参数")

        try:
            expires_at = int(expires)
        except ValueError:
            raise SignatureError("expires 参数格式错误") from None

        current = int(now if now is not None else time.time())
        if expires_at < current:
            raise SignatureError("签名已过期")

        expected = compute_signature(self._normalize(path), expires_at, self.secret, verb)
        if not constant_time_compare(md5, expected):
            raise SignatureError()
