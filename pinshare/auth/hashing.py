"""One-way salted hashing for account PINs and file access codes."""

import asyncio
import logging

from passlib.context import CryptContext

log = logging.getLogger(__name__)

# Fixed work factor; both uses are short, low-entropy secrets
BCRYPT_ROUNDS = 10

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_secret(secret: str) -> str:
    """Hash a PIN or code for storage."""
    return pwd_context.hash(secret)


def verify_secret(candidate: str, hashed: str) -> bool:
    """Verify a plain secret against a stored hash. Unrecognised hashes never match."""
    try:
        return pwd_context.verify(candidate, hashed)
    except ValueError as e:
        log.warning("Stored hash could not be verified: %s", e)
        return False


async def hash_secret_async(secret: str) -> str:
    """hash_secret off the event loop."""
    return await asyncio.to_thread(hash_secret, secret)


async def verify_secret_async(candidate: str, hashed: str) -> bool:
    """verify_secret off the event loop."""
    return await asyncio.to_thread(verify_secret, candidate, hashed)
