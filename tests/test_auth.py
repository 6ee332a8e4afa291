"""Tests for JWT access token handling."""

from datetime import timedelta

import jwt

from lifetasks.auth.jwt import (
    JWT_ALGORITHM,
    create_access_token,
    decode_access_token,
    get_user_id_from_token,
)


def test_token_round_trip():
    token = create_access_token("user-42")

    payload = decode_access_token(token)
    assert payload["sub"] == "user-42"
    assert payload["exp"] > payload["iat"]
    assert get_user_id_from_token(token) == "user-42"


def test_expired_token_is_rejected():
    token = create_access_token("user-42", expires_in=timedelta(seconds=-10))

    assert decode_access_token(token) is None
    assert get_user_id_from_token(token) is None


def test_token_signed_with_other_key_is_rejected():
    forged = jwt.encode({"sub": "user-42"}, "not-the-secret", algorithm=JWT_ALGORITHM)

    assert get_user_id_from_token(forged) is None


def test_garbage_token_is_rejected():
    assert get_user_id_from_token("not-a-jwt") is None
