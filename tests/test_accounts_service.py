"""Tests for account service: validate_pin, create_account, verify_pin."""

import pytest

from pinshare.accounts import service as svc
from pinshare.accounts.service import create_account, get_account, validate_pin, verify_pin
from pinshare.errors import AuthError, ConflictError, ValidationError


@pytest.mark.parametrize("pin", ["1234", "00000", "987654"])
def test_validate_pin_accepts_4_to_6_digits(pin: str) -> None:
    assert validate_pin(pin) == pin


@pytest.mark.parametrize("pin", [None, "", "123", "1234567"])
def test_validate_pin_rejects_length(pin) -> None:
    with pytest.raises(ValidationError, match="4-6 digits"):
        validate_pin(pin)


@pytest.mark.parametrize("pin", ["12a4", "12 34", "-1234", "１２３４"])
def test_validate_pin_rejects_non_digits(pin: str) -> None:
    """Letters, spaces, signs and non-ASCII digits are refused."""
    with pytest.raises(ValidationError, match="only numbers"):
        validate_pin(pin)


@pytest.mark.asyncio
async def test_create_then_verify_pin(db):
    """Signup then login with the same PIN returns the same account."""
    async with db.session() as session:
        account = await create_account(session, "4821")
    assert account.id
    assert account.pin_hash != "4821"
    async with db.session() as session:
        found = await verify_pin(session, "4821")
    assert found.id == account.id


@pytest.mark.asyncio
async def test_verify_pin_wrong_pin_raises(db):
    async with db.session() as session:
        await create_account(session, "4821")
    async with db.session() as session:
        with pytest.raises(AuthError, match="Invalid PIN"):
            await verify_pin(session, "4822")


@pytest.mark.asyncio
async def test_verify_pin_missing_raises_validation(db):
    async with db.session() as session:
        with pytest.raises(ValidationError, match="required"):
            await verify_pin(session, "")


@pytest.mark.asyncio
async def test_verify_pin_finds_match_among_many(db):
    """The scan checks every account until one matches."""
    ids = {}
    async with db.session() as session:
        for pin in ("1111", "2222", "3333"):
            ids[pin] = (await create_account(session, pin)).id
    async with db.session() as session:
        assert (await verify_pin(session, "3333")).id == ids["3333"]
        assert (await verify_pin(session, "1111")).id == ids["1111"]


@pytest.mark.asyncio
async def test_create_account_duplicate_pin_raises(db):
    """Two signups with the same PIN: exactly one succeeds."""
    async with db.session() as session:
        await create_account(session, "5555")
    async with db.session() as session:
        with pytest.raises(ConflictError, match="already taken"):
            await create_account(session, "5555")


@pytest.mark.asyncio
async def test_create_account_invalid_pin_never_persists(db, monkeypatch):
    """Validation fails before hashing or persistence are attempted."""
    async def fail_hash(_pin):
        raise AssertionError("hash must not be called")

    monkeypatch.setattr(svc, "hash_secret_async", fail_hash)
    async with db.session() as session:
        with pytest.raises(ValidationError):
            await create_account(session, "12ab")


@pytest.mark.asyncio
async def test_create_account_unique_constraint_reported_as_conflict(db, monkeypatch):
    """If the scan is raced, the pin_hash unique constraint still yields ConflictError."""
    async def fixed_hash(_pin):
        return "$2b$10$fixedfixedfixedfixedfixedfixedfixedfixedfixedfixedfix"

    async def no_match(_session, _pin):
        return None

    monkeypatch.setattr(svc, "hash_secret_async", fixed_hash)
    monkeypatch.setattr(svc, "find_account_by_pin", no_match)
    async with db.session() as session:
        await create_account(session, "7777")
    async with db.session() as session:
        with pytest.raises(ConflictError):
            await create_account(session, "7777")


@pytest.mark.asyncio
async def test_get_account(db):
    async with db.session() as session:
        account = await create_account(session, "2468")
    async with db.session() as session:
        assert (await get_account(session, account.id)).id == account.id
        assert await get_account(session, "0" * 32) is None
