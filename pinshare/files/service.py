"""File record service: name-scoped records, upload/download orchestration, stats."""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pinshare.auth.hashing import hash_secret_async, verify_secret_async
from pinshare.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    ValidationError,
)
from pinshare.files.models import FileRecord, FileStats, OwnerScope
from pinshare.files.storage import ObjectStorage

log = logging.getLogger(__name__)

CODE_MIN_LENGTH = 4
CODE_MAX_LENGTH = 6


def _duplicate_name_message(scope: OwnerScope) -> str:
    if scope.owner_account_id:
        return "You already have a file with this name. Choose a different name."
    return "A file with this name already exists. Choose a different name."


def check_upload_size(size: int, max_bytes: int) -> None:
    """Reject payloads over max_bytes before they reach object storage."""
    if size > max_bytes:
        raise PayloadTooLargeError(f"File size exceeds {max_bytes / (1024 * 1024):g} MB limit")


def validate_code(code: str) -> str:
    if len(code) < CODE_MIN_LENGTH or len(code) > CODE_MAX_LENGTH:
        raise ValidationError("Code must be 4-6 characters")
    return code


async def find_by_name(session: AsyncSession, name: str, scope: OwnerScope) -> Optional[FileRecord]:
    """Return the record named name within scope, or None."""
    result = await session.execute(
        select(FileRecord).where(FileRecord.scope == scope.key, FileRecord.name == name)
    )
    return result.scalar_one_or_none()


async def get_by_name(session: AsyncSession, name: str, scope: OwnerScope) -> FileRecord:
    record = await find_by_name(session, name, scope)
    if record is None:
        raise NotFoundError("File not found")
    return record


async def list_records(session: AsyncSession, scope: OwnerScope) -> List[FileRecord]:
    """All records in scope, newest first."""
    result = await session.execute(
        select(FileRecord)
        .where(FileRecord.scope == scope.key)
        .order_by(FileRecord.uploaded_at.desc())
    )
    return list(result.scalars().all())


async def get_stats(session: AsyncSession, scope: OwnerScope) -> FileStats:
    """Count and total size of records in scope."""
    result = await session.execute(
        select(func.count(FileRecord.id), func.coalesce(func.sum(FileRecord.file_size_bytes), 0)).where(
            FileRecord.scope == scope.key
        )
    )
    count, total = result.one()
    return FileStats(total_files=int(count), total_size=int(total))


async def create_record(session: AsyncSession, record: FileRecord) -> FileRecord:
    """
    Persist record and commit. The pre-check only gives a friendly error; the
    (scope, name) unique constraint decides races, and loses are reported the same way.
    """
    scope = OwnerScope(key=record.scope, owner_account_id=record.owner_account_id)
    if await find_by_name(session, record.name, scope) is not None:
        raise ConflictError(_duplicate_name_message(scope))
    session.add(record)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        log.info("Duplicate name rejected by unique constraint scope=%s", record.scope)
        raise ConflictError(_duplicate_name_message(scope))
    return record


async def upload_file(
    session: AsyncSession,
    storage: ObjectStorage,
    scope: OwnerScope,
    *,
    name: Optional[str],
    code: Optional[str],
    filename: str,
    mime_type: str,
    data: bytes,
    max_bytes: int,
) -> FileRecord:
    """Validate, store bytes, and record a new file in scope."""
    check_upload_size(len(data), max_bytes)
    name = (name or "").strip()
    if not name or not code:
        raise ValidationError("Name and code are required")
    validate_code(code)

    if await find_by_name(session, name, scope) is not None:
        raise ConflictError(_duplicate_name_message(scope))

    code_hash = await hash_secret_async(code)
    stored = await storage.store(data, mime_type, filename)
    record = FileRecord(
        owner_account_id=scope.owner_account_id,
        scope=scope.key,
        name=name,
        code_hash=code_hash,
        stored_file_name=filename,
        file_size_bytes=len(data),
        mime_type=mime_type,
        storage_url=stored.url,
        storage_object_id=stored.object_id,
    )
    try:
        await create_record(session, record)
    except ConflictError:
        # Lost the race to a concurrent upload of the same name
        try:
            await storage.remove(stored.object_id)
        except StorageError as e:
            log.warning("Could not remove orphaned object %s: %s", stored.object_id, e.details)
        raise
    log.info("Uploaded file scope=%s name=%s size=%d", scope.key, name, len(data))
    return record


async def download_file(
    session: AsyncSession,
    scope: OwnerScope,
    *,
    name: Optional[str],
    code: Optional[str],
) -> FileRecord:
    """Return the record named name in scope if code matches."""
    name = (name or "").strip()
    if not name or not code:
        raise ValidationError("Name and code are required")
    record = await get_by_name(session, name, scope)
    if not await verify_secret_async(code, record.code_hash):
        log.info("Wrong code for file scope=%s name=%s", scope.key, record.name)
        raise AuthError("Invalid secret code")
    return record
