"""Tests for PIN/code hashing."""

import pytest

from pinshare.auth.hashing import (
    hash_secret,
    hash_secret_async,
    verify_secret,
    verify_secret_async,
)


def test_hash_secret_returns_bcrypt_hash() -> None:
    """Hashed secret is a string and differs from plain."""
    hashed = hash_secret("1234")
    assert isinstance(hashed, str)
    assert hashed != "1234"
    assert hashed.startswith("$2")  # bcrypt


def test_hash_secret_is_salted() -> None:
    """Same secret hashes differently each time."""
    assert hash_secret("123456") != hash_secret("123456")


def test_verify_secret_correct() -> None:
    hashed = hash_secret("4821")
    assert verify_secret("4821", hashed) is True


def test_verify_secret_wrong() -> None:
    hashed = hash_secret("4821")
    assert verify_secret("4822", hashed) is False
    assert verify_secret("abcd", hashed) is False


def test_verify_secret_unrecognised_hash_is_false() -> None:
    """A stored value that is not a hash never matches."""
    assert verify_secret("1234", "1234") is False


@pytest.mark.asyncio
async def test_async_wrappers_round_trip() -> None:
    hashed = await hash_secret_async("zz99")
    assert await verify_secret_async("zz99", hashed) is True
    assert await verify_secret_async("zz98", hashed) is False
