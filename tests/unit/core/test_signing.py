"""
签名 URL 单元测试
"""

from urllib.parse import parse_qs, urlparse

import pytest

from bits_core.common.exceptions import SignatureError
from bits_core.common.signing import UrlSigner, compute_signature, constant_time_compare


class TestComputeSignature:
    """签名计算测试"""

    def test_get_signature(self):
        """与 nginx secure_link_md5 "$secure_link_expires$uri secret" 一致"""
        assert compute_signature("/buildpacks/abc", 2147483647, "secret") == "AtUG7IW27hRmzCLuUi7iqw"

    def test_put_signature(self):
        assert compute_signature("/buildpacks/abc", 2147483647, "secret", verb="put") == "Nkyi1HZQNmx-0GXj7Br5mg"

    def test_no_padding(self):
        assert "=" not in compute_signature("/droplets/x", 1, "s")

    def test_constant_time_compare(self):
        assert constant_time_compare("abc", "abc") is True
        assert constant_time_compare("abc", "abd") is False


class TestUrlSigner:
    """UrlSigner 测试"""

    @pytest.fixture
    def signer(self):
        return UrlSigner(secret="secret", public_endpoint="http://public.example.com/", expires_in=60)

    def test_empty_secret(self):
        with pytest.raises(ValueError):
            UrlSigner(secret="", public_endpoint="http://public.example.com")

    def test_sign_get(self, signer):
        url = signer.sign("buildpacks/abc", now=1000)

        expected_md5 = compute_signature("/buildpacks/abc", 1060, "secret")
        assert url == f"http://public.example.com/signed/buildpacks/abc?md5={expected_md5}&expires=1060"

    def test_sign_put(self, signer):
        url = signer.sign("/packages/abc", verb="put", now=1000)

        query = parse_qs(urlparse(url).query)
        assert query["verb"] == ["put"]
        assert query["md5"] == [compute_signature("/packages/abc", 1060, "secret", verb="put")]

    def test_sign_unsupported_verb(self, signer):
        with pytest.raises(ValueError):
            signer.sign("/packages/abc", verb="delete")

    def test_verify_valid(self, signer):
        md5 = compute_signature("/droplets/abc", 1060, "secret")
        signer.verify("/droplets/abc", md5=md5, expires="1060", now=1000)

    def test_verify_expired(self, signer):
        md5 = compute_signature("/droplets/abc", 1060, "secret")

        with pytest.raises(SignatureError, match="过期"):
            signer.verify("/droplets/abc", md5=md5, expires="1060", now=2000)

    def test_verify_tampered_path(self, signer):
        md5 = compute_signature("/droplets/abc", 1060, "secret")

        with pytest.raises(SignatureError):
            signer.verify("/droplets/other", md5=md5, expires="1060", now=1000)

    def test_verify_tampered_expires(self, signer):
        md5 = compute_signature("/droplets/abc", 1060, "secret")

        with pytest.raises(SignatureError):
            signer.verify("/droplets/abc", md5=md5, expires="9999", now=1000)

    @pytest.mark.parametrize("md5,expires", [(None, "1060"), ("abc", None), ("", "")])
    def test_verify_missing_params(self, signer, md5, expires):
        with pytest.raises(SignatureError, match="缺少"):
            signer.verify("/droplets/abc", md5=md5, expires=expires, now=1000)

    def test_verify_bad_expires(self, signer):
        with pytest.raises(SignatureError):
            signer.verify("/droplets/abc", md5="abc", expires="tomorrow", now=1000)

    def test_get_url_cannot_upload(self, signer):
        """GET 签名不能用于 PUT"""
        md5 = compute_signature("/packages/abc", 1060, "secret")

        with pytest.raises(SignatureError):
            signer.verify("/packages/abc", md5=md5, expires="1060", verb="put", now=1000)
