from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from resume_tailor.core.errors import PersistenceError, StorageError, ValidationError
from resume_tailor.schemas.ingest import DocumentOut, ManualIngestRequest, ManualIngestResults
from resume_tailor.schemas.records import EducationIn, ProfileIn, SkillIn, WorkExperienceIn
from resume_tailor.storage.file_store import LocalFileStore, build_object_key, sanitize_filename
from resume_tailor.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MB

ALLOWED_CONTENT_TYPES = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "text/plain": "txt",
    "application/vnd.apple.pages": "pages",
}
_GENERIC_CONTENT_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

_work_adapter = TypeAdapter(list[WorkExperienceIn])
_education_adapter = TypeAdapter(list[EducationIn])
_skill_adapter = TypeAdapter(list[SkillIn])


@dataclass
class ManualIngestResult:
    results: ManualIngestResults = field(default_factory=ManualIngestResults)
    errors: list[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.errors)


def _first_error(exc: PydanticValidationError) -> str:
    errors = exc.errors(include_url=False)
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    suffix = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{location}: {message}{suffix}" if location else f"{message}{suffix}"


def _ingest_collection(
    label: str,
    raw: Any,
    validate: Callable[[Any], Any],
    write: Callable[[Any], Any],
    errors: list[str],
) -> Any:
    try:
        items = validate(raw)
    except PydanticValidationError as exc:
        errors.append(f"{label} error: {_first_error(exc)}")
        return None
    try:
        return write(items)
    except PersistenceError as exc:
        errors.append(f"{label} error: {exc.details or exc}")
        return None


def ingest_manual(store: RecordStore, user_id: str, payload: ManualIngestRequest) -> ManualIngestResult:
    """Write each collection independently; a failure in one never rolls back another."""
    outcome = ManualIngestResult()
    errors = outcome.errors
    results = outcome.results

    if payload.profile is not None:
        results.profile = _ingest_collection(
            "Profile",
            payload.profile,
            ProfileIn.model_validate,
            lambda profile: store.upsert_profile(user_id, profile),
            errors,
        )

    if payload.work_experiences:
        results.work_experiences = _ingest_collection(
            "Work experiences",
            payload.work_experiences,
            _work_adapter.validate_python,
            lambda items: store.insert_work_experiences(user_id, items),
            errors,
        ) or []

    if payload.educations:
        results.educations = _ingest_collection(
            "Educations",
            payload.educations,
            _education_adapter.validate_python,
            lambda items: store.insert_educations(user_id, items),
            errors,
        ) or []

    if payload.skills:
        results.skills = _ingest_collection(
            "Skills",
            payload.skills,
            _skill_adapter.validate_python,
            lambda items: store.insert_skills(user_id, items),
            errors,
        ) or []

    if errors:
        logger.warning("manual_ingest_partial user=%s errors=%s", user_id, len(errors))
    else:
        logger.info(
            "manual_ingest_completed user=%s work=%s education=%s skills=%s",
            user_id,
            len(results.work_experiences),
            len(results.educations),
            len(results.skills),
        )
    return outcome


def _as_items(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


def echo_manual(payload: ManualIngestRequest) -> ManualIngestResults:
    return ManualIngestResults(
        profile=payload.profile,
        work_experiences=_as_items(payload.work_experiences),
        educations=_as_items(payload.educations),
        skills=_as_items(payload.skills),
    )


def _extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def resolve_content_type(filename: str, content_type: str | None) -> str:
    """Return the allow-listed MIME type for an upload or raise ``ValidationError``."""
    declared = (content_type or "").split(";", 1)[0].strip().lower()
    if declared in ALLOWED_CONTENT_TYPES:
        return declared
    if declared in _GENERIC_CONTENT_TYPES:
        ext = _extension(filename)
        for mime, allowed_ext in ALLOWED_CONTENT_TYPES.items():
            if allowed_ext == ext:
                return mime
    raise ValidationError("Invalid file type. Allowed: PDF, DOC, DOCX, TXT, PAGES")


def check_upload_size(size: int, limit: int = MAX_UPLOAD_BYTES) -> None:
    if size > limit:
        raise ValidationError(f"File size exceeds {limit // (1024 * 1024)}MB limit")


def extract_document_text(content_type: str, content: bytes) -> str | None:
    # PDF, DOC, DOCX and Pages extraction is not implemented; those uploads are stored without text.
    if content_type == "text/plain":
        return content.decode("utf-8", errors="replace")
    return None


def ingest_document(
    store: RecordStore,
    files: LocalFileStore,
    user_id: str,
    *,
    filename: str,
    content_type: str,
    content: bytes,
) -> DocumentOut:
    key = build_object_key(user_id, filename)
    file_url = files.save(key, content)
    parsed_text = extract_document_text(content_type, content)

    try:
        row = store.insert_document(user_id, file_url=file_url, storage_key=key, parsed_text=parsed_text)
    except PersistenceError as exc:
        try:
            files.remove(key)
        except StorageError:
            logger.warning("orphaned_upload key=%s", key)
        raise PersistenceError("Failed to save document reference", details=exc.details) from exc

    logger.info(
        "document_ingested user=%s type=%s bytes=%s has_text=%s",
        user_id,
        content_type,
        len(content),
        parsed_text is not None,
    )
    return DocumentOut(
        id=row["id"],
        file_url=row["file_url"],
        uploaded_at=row["uploaded_at"],
        has_parsed_text=bool(row["parsed_text"]),
    )


def simulate_document(filename: str, content_type: str) -> DocumentOut:
    now_ms = int(time.time() * 1000)
    return DocumentOut(
        id=f"demo-{now_ms}",
        file_url=f"demo://uploads/{sanitize_filename(filename)}",
        uploaded_at=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(now_ms / 1000)),
        has_parsed_text=content_type == "text/plain",
    )


def list_documents(store: RecordStore, user_id: str) -> list[dict[str, Any]]:
    return [
        {
            "id": doc.id,
            "file_url": doc.file_url,
            "uploaded_at": doc.uploaded_at,
            "has_parsed_text": bool(doc.parsed_text),
        }
        for doc in store.fetch_documents(user_id)
    ]
