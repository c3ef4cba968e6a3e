"""Account routes: signup, login, me."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pinshare.accounts.models import Account, AccountResponse, AuthResponse, PinRequest
from pinshare.accounts.service import create_account, verify_pin
from pinshare.auth.dependencies import get_current_account, get_token_issuer
from pinshare.auth.jwt import TokenIssuer
from pinshare.db.session import get_db
from pinshare.errors import DependencyError
from pinshare.limiter import auth_rate_limit, limiter

router = APIRouter(prefix="/api/auth", tags=["auth"])
log = logging.getLogger(__name__)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_rate_limit)
async def signup(
    request: Request,
    body: PinRequest,
    session: Annotated[AsyncSession, Depends(get_db)],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthResponse:
    """Create an account from a 4-6 digit PIN; returns a token."""
    try:
        account = await create_account(session, body.pin)
    except SQLAlchemyError as e:
        log.exception("Signup failed")
        raise DependencyError("Failed to create account", details=str(e)) from e
    return AuthResponse(
        message="Account created successfully!",
        token=tokens.issue(account.id),
        user_id=account.id,
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(auth_rate_limit)
async def login(
    request: Request,
    body: PinRequest,
    session: Annotated[AsyncSession, Depends(get_db)],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthResponse:
    """Login with a PIN; returns a token."""
    try:
        account = await verify_pin(session, body.pin)
    except SQLAlchemyError as e:
        log.exception("Login failed")
        raise DependencyError("Login failed", details=str(e)) from e
    log.info("Login successful for account id=%s", account.id)
    return AuthResponse(
        message="Login successful!",
        token=tokens.issue(account.id),
        user_id=account.id,
    )


@router.get("/me", response_model=AccountResponse)
async def me(
    current_account: Annotated[Account, Depends(get_current_account)],
) -> AccountResponse:
    """Return the authenticated account."""
    return AccountResponse(user_id=current_account.id, created_at=current_account.created_at)
