"""Account SQLAlchemy model and Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pinshare.db.session import Base
from pinshare.db.types import UTCDateTime, utcnow


def _new_id() -> str:
    return uuid.uuid4().hex


class Account(Base):
    """Account table. The PIN is only stored hashed; pin_hash is unique."""

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    pin_hash: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    # Microsecond resolution keeps login scans in insertion order
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, nullable=False, index=True
    )


# Pydantic schemas for API
class PinRequest(BaseModel):
    """Signup or login request body."""

    pin: Optional[str] = None


class AuthResponse(BaseModel):
    """Token handed back after signup or login."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    message: str
    token: str
    user_id: str


class AccountResponse(BaseModel):
    """Account as returned by API (no PIN hash)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    created_at: datetime
