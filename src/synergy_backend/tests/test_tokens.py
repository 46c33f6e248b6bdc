from datetime import timedelta

import pytest
from jose import jwt

from synergy_backend.utils.tokens import InvalidTokenError, TokenService


@pytest.mark.unit
class TestTokenService:

    def test_issue_and_decode(self):
        service = TokenService(secret="s3cret")
        assert service.decode_subject(service.issue("u-1")) == "u-1"

    def test_payload_carries_subject_and_user_id(self):
        service = TokenService(secret="s3cret")
        claims = jwt.decode(service.issue("u-1"), "s3cret", algorithms=["HS256"])

        assert claims["sub"] == "u-1"
        assert claims["userId"] == "u-1"
        assert claims["exp"] > claims["iat"]

    def test_legacy_user_id_claim_is_accepted(self):
        token = jwt.encode({"userId": "u-legacy"}, "s3cret", algorithm="HS256")
        assert TokenService(secret="s3cret").decode_subject(token) == "u-legacy"

    def test_expired(self):
        service = TokenService(secret="s3cret")
        with pytest.raises(InvalidTokenError):
            service.decode_subject(service.issue("u-1", expires_delta=timedelta(minutes=-1)))

    def test_wrong_secret(self):
        token = TokenService(secret="one").issue("u-1")
        with pytest.raises(InvalidTokenError):
            TokenService(secret="two").decode_subject(token)

    def test_missing_subject(self):
        token = jwt.encode({"foo": "bar"}, "s3cret", algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            TokenService(secret="s3cret").decode_subject(token)

    def test_expires_in_seconds(self):
        assert TokenService(secret="s", expire_minutes=15).expires_in == 900
