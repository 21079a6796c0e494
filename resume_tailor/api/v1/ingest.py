from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from resume_tailor.api.deps import get_current_user, get_file_store, get_record_store
from resume_tailor.core.config import settings
from resume_tailor.core.errors import ValidationError
from resume_tailor.core.rate_limit import rate_limit
from resume_tailor.core.security import AuthenticatedUser
from resume_tailor.schemas.ingest import (
    DocumentListResponse,
    DocumentUploadResponse,
    ManualIngestRequest,
    ManualIngestResponse,
    PartialIngestResponse,
)
from resume_tailor.services.ingest_service import (
    check_upload_size,
    echo_manual,
    ingest_document,
    ingest_manual,
    list_documents,
    resolve_content_type,
    simulate_document,
)
from resume_tailor.storage.file_store import LocalFileStore
from resume_tailor.storage.record_store import RecordStore

router = APIRouter()

_CHUNK_BYTES = 1024 * 64


async def _read_upload(file: UploadFile, limit: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        check_upload_size(total, limit)
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/ingest/document", response_model=DocumentUploadResponse)
@rate_limit()
async def upload_document(
    request: Request,
    file: UploadFile | None = File(default=None),
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: RecordStore | None = Depends(get_record_store),
    files: LocalFileStore = Depends(get_file_store),
):
    _ = request
    if file is None:
        raise ValidationError("No file provided")

    filename = file.filename or "upload"
    content_type = resolve_content_type(filename, file.content_type)
    if file.size is not None:
        check_upload_size(file.size, settings.max_upload_bytes)
    content = await _read_upload(file, settings.max_upload_bytes)

    if store is None or user is None:
        return DocumentUploadResponse(
            demo=True,
            message="Demo mode: File upload simulated. Configure the record store for real uploads.",
            data=simulate_document(filename, content_type),
        )

    document = await asyncio.to_thread(
        ingest_document,
        store,
        files,
        user.id,
        filename=filename,
        content_type=content_type,
        content=content,
    )
    return DocumentUploadResponse(message="Document uploaded successfully", data=document)


@router.get("/ingest/document", response_model=DocumentListResponse)
async def get_documents(
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: RecordStore | None = Depends(get_record_store),
):
    if store is None or user is None:
        return DocumentListResponse(demo=True, documents=[])
    return DocumentListResponse(documents=await asyncio.to_thread(list_documents, store, user.id))


@router.post(
    "/ingest/manual",
    response_model=ManualIngestResponse,
    responses={status.HTTP_207_MULTI_STATUS: {"model": PartialIngestResponse}},
)
@rate_limit()
async def ingest_manual_records(
    request: Request,
    payload: ManualIngestRequest,
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: RecordStore | None = Depends(get_record_store),
):
    _ = request
    if store is None or user is None:
        return ManualIngestResponse(
            demo=True,
            message="Demo mode: Data accepted. Configure the record store for persistence.",
            results=echo_manual(payload),
        )

    outcome = await asyncio.to_thread(ingest_manual, store, user.id, payload)
    if outcome.partial:
        body = PartialIngestResponse(details=outcome.errors, results=outcome.results)
        return JSONResponse(status_code=status.HTTP_207_MULTI_STATUS, content=jsonable_encoder(body))
    return ManualIngestResponse(message="Data ingested successfully", results=outcome.results)
