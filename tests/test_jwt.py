"""Tests for bearer token issue and verification."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from jose import jwt

from pinshare.auth.jwt import TokenIssuer
from pinshare.errors import AuthError, InvalidTokenError

SECRET = "test-secret-at-least-32-characters-long"


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(SECRET)


def test_issue_and_verify(issuer: TokenIssuer) -> None:
    """Token carries the account id as subject."""
    token = issuer.issue("abc123")
    assert isinstance(token, str)
    assert issuer.verify(token) == "abc123"


def test_token_expires_after_seven_days(issuer: TokenIssuer) -> None:
    payload = issuer.decode(issuer.issue("abc123"))
    assert payload is not None
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())


def test_from_settings_uses_configured_lifetime() -> None:
    settings = MagicMock()
    settings.jwt_secret = SECRET
    settings.jwt_algorithm = "HS256"
    settings.token_expire_days = 2
    issuer = TokenIssuer.from_settings(settings)
    payload = issuer.decode(issuer.issue("x"))
    assert payload["exp"] - payload["iat"] == 2 * 24 * 3600


def test_expired_token_rejected(issuer: TokenIssuer) -> None:
    token = issuer.issue("abc123", expires_delta=timedelta(seconds=-10))
    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_token_signed_with_other_secret_rejected(issuer: TokenIssuer) -> None:
    token = TokenIssuer("another-secret-that-is-also-long-enough").issue("abc123")
    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_tampered_token_rejected(issuer: TokenIssuer) -> None:
    token = issuer.issue("abc123")
    head, body, sig = token.split(".")
    sig = ("A" if sig[0] != "A" else "B") + sig[1:]
    tampered = ".".join([head, body, sig])
    with pytest.raises(InvalidTokenError):
        issuer.verify(tampered)


def test_garbage_rejected(issuer: TokenIssuer) -> None:
    assert issuer.decode("not-a-jwt") is None
    with pytest.raises(InvalidTokenError):
        issuer.verify("not-a-jwt")
    with pytest.raises(InvalidTokenError):
        issuer.verify("")


def test_wrong_type_or_missing_subject_rejected(issuer: TokenIssuer) -> None:
    other_type = jwt.encode({"sub": "abc123", "type": "refresh"}, SECRET, algorithm="HS256")
    no_subject = jwt.encode({"type": "access"}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        issuer.verify(other_type)
    with pytest.raises(InvalidTokenError):
        issuer.verify(no_subject)


def test_invalid_token_is_auth_error() -> None:
    """Token failures are reported as 401s with their own message."""
    err = InvalidTokenError()
    assert isinstance(err, AuthError)
    assert err.status_code == 401
    assert err.to_dict() == {"error": "Invalid or expired token"}
