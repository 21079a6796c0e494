from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header

from resume_tailor.ai.factory import build_resume_generator
from resume_tailor.core.config import settings
from resume_tailor.core.security import AuthenticatedUser, TokenVerifier, authenticate
from resume_tailor.services.generators import ResumeGenerator
from resume_tailor.services.tailoring_service import TailoringService
from resume_tailor.storage.file_store import LocalFileStore
from resume_tailor.storage.record_store import RecordStore, SQLiteRecordStore


@lru_cache(maxsize=1)
def _sqlite_record_store() -> SQLiteRecordStore:
    store = SQLiteRecordStore(settings.record_store_db_path or "")
    store.init_schema()
    return store


def get_record_store() -> RecordStore | None:
    if not settings.record_store_enabled:
        return None
    return _sqlite_record_store()


@lru_cache(maxsize=1)
def get_file_store() -> LocalFileStore:
    return LocalFileStore(settings.files_dir, settings.files_public_base_url)


@lru_cache(maxsize=1)
def get_token_verifier() -> TokenVerifier | None:
    if not settings.auth_jwt_secret:
        return None
    return TokenVerifier(settings.auth_jwt_secret, audience=settings.auth_jwt_audience)


@lru_cache(maxsize=1)
def get_resume_generator() -> ResumeGenerator:
    return build_resume_generator()


def get_current_user(
    authorization: str | None = Header(default=None),
    store: RecordStore | None = Depends(get_record_store),
    verifier: TokenVerifier | None = Depends(get_token_verifier),
) -> AuthenticatedUser | None:
    # Without a record store there is nothing per-user to protect; requests run in demo mode.
    if store is None:
        return None
    return authenticate(authorization, verifier)


def get_tailoring_service(
    generator: ResumeGenerator = Depends(get_resume_generator),
    store: RecordStore | None = Depends(get_record_store),
) -> TailoringService:
    return TailoringService(generator, store)
