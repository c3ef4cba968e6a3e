"""JWT creation and validation."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from pinshare.config import Settings
from pinshare.errors import InvalidTokenError

TOKEN_TYPE = "access"


class TokenIssuer:
    """Issues and verifies signed bearer tokens whose subject is an account id.

    There is no revocation: a token stays valid until it expires.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_days: int = 7) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self.expire_days = expire_days

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_days=settings.token_expire_days,
        )

    def issue(self, account_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a token for account_id expiring after expire_days (or expires_delta)."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(days=self.expire_days))
        to_encode: dict[str, Any] = {
            "sub": account_id,
            "iat": now,
            "exp": expire,
            "type": TOKEN_TYPE,
        }
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Optional[dict[str, Any]]:
        """Decode and validate a JWT; return payload or None."""
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            return None

    def verify(self, token: str) -> str:
        """Return the account id carried by a valid token; raise InvalidTokenError otherwise."""
        payload = self.decode(token)
        if not payload or payload.get("type") != TOKEN_TYPE:
            raise InvalidTokenError()
        subject = payload.get("sub")
        if not subject:
            raise InvalidTokenError()
        return subject
