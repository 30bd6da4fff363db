"""Unit tests for token and password helpers."""
import re
from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from promptify.core.security import (
    create_access_token,
    decode_access_token,
    generate_session_id,
    get_password_hash,
    verify_password,
)


class TestAccessToken:
    def test_round_trip_carries_subject_and_type(self):
        user_id = uuid4()
        payload = decode_access_token(create_access_token(user_id))
        assert payload["sub"] == str(user_id)
        assert payload["type"] == "access"
        assert payload["exp"] > payload["iat"]

    def test_tokens_are_unique(self):
        user_id = uuid4()
        assert create_access_token(user_id) != create_access_token(user_id)

    def test_expired_token_rejected(self):
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-10))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_tampered_token_rejected(self):
        token = create_access_token(uuid4())
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token[:-2] + "xx")


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = get_password_hash("Secret123")
        assert hashed != "Secret123"
        assert verify_password("Secret123", hashed)
        assert not verify_password("secret123", hashed)

    def test_long_password_truncated_consistently(self):
        password = "A1" + "x" * 100
        assert verify_password(password[:72], get_password_hash(password))


def test_session_id_is_32_hex_characters():
    assert re.fullmatch(r"[0-9a-f]{32}", generate_session_id())
