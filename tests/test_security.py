"""Unit tests for tokens and password hashing."""

import jwt
import pytest

from lingopal.auth.jwt import TokenError, create_access_token, verify_token
from lingopal.auth.password import hash_password, hash_reset_token, verify_password


# ═══════════════════════════════════════════════════════════
# JWT
# ═══════════════════════════════════════════════════════════


def test_token_round_trip(settings):
    token = create_access_token("user-123", settings)
    assert verify_token(token, settings) == "user-123"


def test_token_claims(settings):
    token = create_access_token("user-123", settings)
    claims = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    assert claims["sub"] == "user-123"
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60


def test_expired_token(settings):
    token = create_access_token("user-123", settings, expires_minutes=-5)
    with pytest.raises(TokenError, match="expired"):
        verify_token(token, settings)


def test_wrong_secret(settings):
    token = jwt.encode({"sub": "user-123", "type": "access", "exp": 9999999999}, "other", "HS256")
    with pytest.raises(TokenError):
        verify_token(token, settings)


def test_token_without_expiry_rejected(settings):
    token = jwt.encode({"sub": "user-123", "type": "access"}, settings.jwt_secret, "HS256")
    with pytest.raises(TokenError):
        verify_token(token, settings)


def test_wrong_token_type_rejected(settings):
    token = jwt.encode(
        {"sub": "user-123", "type": "refresh", "exp": 9999999999}, settings.jwt_secret, "HS256"
    )
    with pytest.raises(TokenError, match="access"):
        verify_token(token, settings)


def test_alg_none_rejected(settings):
    token = jwt.encode({"sub": "user-123", "type": "access", "exp": 9999999999}, None, "none")
    with pytest.raises(TokenError):
        verify_token(token, settings)


# ═══════════════════════════════════════════════════════════
# Passwords
# ═══════════════════════════════════════════════════════════


def test_hash_and_verify():
    hashed = hash_password("secret123")
    assert hashed.startswith("$2b$")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_hashes_are_salted():
    assert hash_password("secret123") != hash_password("secret123")


def test_malformed_hash_never_matches():
    assert not verify_password("secret123", "not-a-bcrypt-hash")
    assert not verify_password("secret123", "")


def test_reset_token_digest():
    digest = hash_reset_token("abc")
    assert len(digest) == 64
    assert digest == hash_reset_token("abc")
    assert digest != hash_reset_token("abd")
