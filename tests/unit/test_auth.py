"""Tests for JWT helpers."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest
from fastapi import HTTPException

from orgportal.auth import create_access_token, decode_jwt
from orgportal.config import get_settings


class TestTokens:
    def test_round_trip(self):
        user_id = uuid4()

        payload = decode_jwt(create_access_token(user_id))

        assert payload["sub"] == str(user_id)
        assert payload["type"] == "access"

    def test_expired_token(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "access", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )

        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token expired"

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "x", "type": "access"}, "another-secret", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(token)

        assert exc_info.value.detail == "Invalid token"
