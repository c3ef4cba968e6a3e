"""Account service: PIN validation, signup and PIN login."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pinshare.accounts.models import Account
from pinshare.auth.hashing import hash_secret_async, verify_secret_async
from pinshare.errors import AuthError, ConflictError, ValidationError

log = logging.getLogger(__name__)

PIN_MIN_LENGTH = 4
PIN_MAX_LENGTH = 6

DUPLICATE_PIN_MESSAGE = "This PIN is already taken. Please choose another."


def validate_pin(pin: Optional[str]) -> str:
    """Return pin if it is 4-6 decimal digits; raise ValidationError otherwise."""
    if not pin or len(pin) < PIN_MIN_LENGTH or len(pin) > PIN_MAX_LENGTH:
        raise ValidationError("PIN must be 4-6 digits")
    if not (pin.isascii() and pin.isdigit()):
        raise ValidationError("PIN must contain only numbers")
    return pin


async def get_account(session: AsyncSession, account_id: str) -> Optional[Account]:
    """Return account by id or None."""
    return await session.get(Account, account_id)


async def find_account_by_pin(session: AsyncSession, pin: str) -> Optional[Account]:
    """
    Return the first account whose stored hash matches pin, or None.

    Every hash has its own salt, so there is no way to look a PIN up directly:
    this checks each account in insertion order and is O(n) in registered accounts.
    """
    result = await session.execute(select(Account).order_by(Account.created_at))
    for account in result.scalars():
        if await verify_secret_async(pin, account.pin_hash):
            return account
    return None


async def create_account(session: AsyncSession, pin: Optional[str]) -> Account:
    """
    Validate, hash and persist a new account. Commits the session.
    Raises ValidationError for a malformed PIN and ConflictError for a PIN in use.
    """
    pin = validate_pin(pin)
    if await find_account_by_pin(session, pin) is not None:
        log.info("Signup rejected: PIN already in use")
        raise ConflictError(DUPLICATE_PIN_MESSAGE)
    account = Account(pin_hash=await hash_secret_async(pin))
    session.add(account)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        log.info("Signup rejected by unique constraint on pin_hash")
        raise ConflictError(DUPLICATE_PIN_MESSAGE)
    log.info("Created account id=%s", account.id)
    return account


async def verify_pin(session: AsyncSession, pin: Optional[str]) -> Account:
    """Return the account owning pin; raise ValidationError if missing, AuthError if no match."""
    if not pin:
        raise ValidationError("PIN is required")
    account = await find_account_by_pin(session, pin)
    if account is None:
        log.warning("Login failed: no account matches PIN")
        raise AuthError("Invalid PIN")
    return account
