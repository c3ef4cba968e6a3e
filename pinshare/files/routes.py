"""File API routes: upload, download, list, stats."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pinshare.auth.dependencies import get_app_settings, get_owner_scope
from pinshare.config import Settings
from pinshare.db.session import get_db
from pinshare.errors import DependencyError, StorageError, ValidationError
from pinshare.files.models import (
    DownloadInfo,
    DownloadRequest,
    DownloadResponse,
    FileListResponse,
    FileSummary,
    OwnerScope,
    StatsResponse,
    UploadedFile,
    UploadResponse,
)
from pinshare.files.service import (
    check_upload_size,
    download_file,
    get_stats,
    list_records,
    upload_file,
)
from pinshare.files.storage import ObjectStorage, get_storage

router = APIRouter(prefix="/api", tags=["files"])
log = logging.getLogger(__name__)


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload(
    scope: Annotated[OwnerScope, Depends(get_owner_scope)],
    session: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    file: Annotated[Optional[UploadFile], File()] = None,
    name: Annotated[Optional[str], Form()] = None,
    code: Annotated[Optional[str], Form()] = None,
) -> UploadResponse:
    """
    Upload a file under a name and secret code (multipart fields file, name, code).
    Names are unique per account, or globally when auth is disabled.
    """
    if file is None:
        raise ValidationError("No file uploaded")
    if file.size is not None:
        check_upload_size(file.size, settings.max_upload_bytes)
    data = await file.read()
    try:
        record = await upload_file(
            session,
            storage,
            scope,
            name=name,
            code=code,
            filename=file.filename or "file",
            mime_type=file.content_type or "application/octet-stream",
            data=data,
            max_bytes=settings.max_upload_bytes,
        )
    except StorageError as e:
        log.error("Upload failed: %s", e.details or e.message)
        raise DependencyError("Failed to upload file", details=e.details or e.message) from e
    except SQLAlchemyError as e:
        log.exception("Upload failed")
        raise DependencyError("Failed to upload file", details=str(e)) from e
    return UploadResponse(
        data=UploadedFile(
            name=record.name,
            file_name=record.stored_file_name,
            file_size=record.file_size_bytes,
            upload_date=record.uploaded_at,
        )
    )


@router.post("/download", response_model=DownloadResponse)
async def download(
    body: DownloadRequest,
    scope: Annotated[OwnerScope, Depends(get_owner_scope)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> DownloadResponse:
    """Return metadata and download URL for the file matching name and code."""
    try:
        record = await download_file(session, scope, name=body.name, code=body.code)
    except SQLAlchemyError as e:
        log.exception("Download failed")
        raise DependencyError("Failed to retrieve file", details=str(e)) from e
    log.info("download scope=%s name=%s", scope.key, record.name)
    return DownloadResponse(
        data=DownloadInfo(
            file_name=record.stored_file_name,
            file_size=record.file_size_bytes,
            file_type=record.mime_type,
            download_url=record.storage_url,
            upload_date=record.uploaded_at,
        )
    )


@router.get("/files", response_model=FileListResponse)
async def list_files(
    scope: Annotated[OwnerScope, Depends(get_owner_scope)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> FileListResponse:
    """List files in the caller's scope, newest first. URLs are withheld."""
    try:
        records = await list_records(session, scope)
    except SQLAlchemyError as e:
        log.exception("List files failed")
        raise DependencyError("Failed to list files", details=str(e)) from e
    return FileListResponse(
        data=[
            FileSummary(
                name=r.name,
                file_name=r.stored_file_name,
                file_size=r.file_size_bytes,
                file_type=r.mime_type,
                upload_date=r.uploaded_at,
            )
            for r in records
        ]
    )


@router.get("/stats", response_model=StatsResponse)
async def stats(
    scope: Annotated[OwnerScope, Depends(get_owner_scope)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> StatsResponse:
    """Count and total size of files in the caller's scope."""
    try:
        result = await get_stats(session, scope)
    except SQLAlchemyError as e:
        log.exception("Stats failed")
        raise DependencyError("Failed to get stats") from e
    return StatsResponse(
        total_files=result.total_files,
        total_size=result.total_size,
        total_size_kb=result.total_size_kb,
    )
