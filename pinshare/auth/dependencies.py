"""FastAPI dependencies for auth and ownership scope."""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pinshare.accounts.models import Account
from pinshare.accounts.service import get_account
from pinshare.auth.jwt import TokenIssuer
from pinshare.config import Settings
from pinshare.db.session import get_db
from pinshare.errors import AuthError
from pinshare.files.models import OwnerScope

security = HTTPBearer(auto_error=False)
log = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.tokens


async def get_current_account(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    session: Annotated[AsyncSession, Depends(get_db)],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> Account:
    """Resolve Bearer token to current account; raise AuthError if invalid or missing."""
    if not credentials:
        log.debug("Request missing Bearer token")
        raise AuthError("No token provided")
    try:
        account_id = tokens.verify(credentials.credentials)
    except AuthError:
        log.debug("Invalid or expired access token")
        raise
    account = await get_account(session, account_id)
    if not account:
        log.warning("Token valid but account not found: id=%s", account_id)
        raise AuthError("User not found")
    return account


async def get_owner_scope(
    settings: Annotated[Settings, Depends(get_app_settings)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    session: Annotated[AsyncSession, Depends(get_db)],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> OwnerScope:
    """Caller's account scope when auth is required, otherwise the global scope."""
    if not settings.require_auth:
        return OwnerScope.global_scope()
    account = await get_current_account(credentials, session, tokens)
    return OwnerScope.for_account(account.id)
