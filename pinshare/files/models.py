"""FileRecord SQLAlchemy model, ownership scope, and Pydantic schemas."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import BigInteger, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pinshare.db.session import Base
from pinshare.db.types import UTCDateTime, utcnow

GLOBAL_SCOPE = "global"


@dataclass(frozen=True)
class OwnerScope:
    """The namespace a file name is unique within: one account, or the whole deployment."""

    key: str
    owner_account_id: Optional[str] = None

    @classmethod
    def for_account(cls, account_id: str) -> "OwnerScope":
        return cls(key=f"account:{account_id}", owner_account_id=account_id)

    @classmethod
    def global_scope(cls) -> "OwnerScope":
        return cls(key=GLOBAL_SCOPE)


def _new_id() -> str:
    return uuid.uuid4().hex


class FileRecord(Base):
    """Metadata for one uploaded file; bytes live in object storage."""

    __tablename__ = "file_records"
    # Authoritative name-uniqueness guard; the service pre-check only gives a friendlier error
    __table_args__ = (UniqueConstraint("scope", "name", name="uq_file_records_scope_name"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    owner_account_id: Mapped[Optional[str]] = mapped_column(
        String(32), ForeignKey("accounts.id"), nullable=True, index=True
    )
    scope: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code_hash: Mapped[str] = mapped_column(Text, nullable=False)
    stored_file_name: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_url: Mapped[str] = mapped_column(Text, nullable=False)
    storage_object_id: Mapped[str] = mapped_column(String(1024), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, nullable=False
    )


@dataclass(frozen=True)
class FileStats:
    total_files: int
    total_size: int

    @property
    def total_size_kb(self) -> str:
        """Total size in KiB, two decimals, as a string."""
        return f"{self.total_size / 1024:.2f}"


# Pydantic schemas for API
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DownloadRequest(BaseModel):
    """Download request body."""

    name: Optional[str] = None
    code: Optional[str] = None


class UploadedFile(_CamelModel):
    name: str
    file_name: str
    file_size: int
    upload_date: datetime


class UploadResponse(_CamelModel):
    success: bool = True
    message: str = "File uploaded successfully!"
    data: UploadedFile


class DownloadInfo(_CamelModel):
    file_name: str
    file_size: int
    file_type: str
    download_url: str
    upload_date: datetime


class DownloadResponse(_CamelModel):
    success: bool = True
    data: DownloadInfo


class FileSummary(_CamelModel):
    """Listing entry; carries no download URL since that requires the code."""

    name: str
    file_name: str
    file_size: int
    file_type: str
    upload_date: datetime


class FileListResponse(_CamelModel):
    success: bool = True
    data: List[FileSummary]


class StatsResponse(_CamelModel):
    total_files: int
    total_size: int
    total_size_kb: str = Field(alias="totalSizeKB")
