from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from resume_tailor.core.errors import AuthError, NotFoundError, PersistenceError, ValidationError
from resume_tailor.core.security import AuthenticatedUser
from resume_tailor.schemas.resume import TailoredResume
from resume_tailor.services.context_builder import ManualRecords, build_context_from_records
from resume_tailor.services.generators import ResumeGenerator
from resume_tailor.services.prompt import build_tailoring_prompt
from resume_tailor.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

# Used when neither a record store nor inline records are available.
GENERIC_CONTEXT = "User has not provided background information yet."
DOCUMENT_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True)
class PersistOutcome:
    saved_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.saved_id is not None


@dataclass(frozen=True)
class TailoringOutcome:
    resume: TailoredResume
    persist: PersistOutcome
    generated_at: datetime
    demo: bool = False


class TailoringService:
    """Turns a job description plus the caller's background into a tailored resume.

    The pipeline is linear: validate, acquire context, build the prompt,
    call the generator once, then try to save the result. Saving is best
    effort and never changes the outcome of a successful generation.
    """

    def __init__(self, generator: ResumeGenerator, store: RecordStore | None = None):
        self._generator = generator
        self._store = store

    async def tailor(
        self,
        job_description: str | None,
        *,
        user: AuthenticatedUser | None = None,
        use_documents: bool = False,
        inline_records: ManualRecords | None = None,
    ) -> TailoringOutcome:
        job_description = (job_description or "").strip()
        if not job_description:
            raise ValidationError("Job description is required")

        if self._generator.is_demo:
            logger.info("resume_generate_demo_mode")
            resume = await self._generator.generate(build_tailoring_prompt(GENERIC_CONTEXT, job_description))
            return TailoringOutcome(resume=resume, persist=PersistOutcome(), generated_at=_utc_now(), demo=True)

        context = await self.acquire_context(user=user, use_documents=use_documents, inline_records=inline_records)
        prompt = build_tailoring_prompt(context, job_description)
        logger.info("resume_generate_started context_len=%s jd_len=%s", len(context), len(job_description))
        resume = await self._generator.generate(prompt)

        persist = await self._persist(user, job_description, resume)
        return TailoringOutcome(resume=resume, persist=persist, generated_at=_utc_now())

    async def acquire_context(
        self,
        *,
        user: AuthenticatedUser | None,
        use_documents: bool = False,
        inline_records: ManualRecords | None = None,
    ) -> str:
        if inline_records is not None and not inline_records.is_empty:
            return build_context_from_records(inline_records)

        if self._store is None:
            return GENERIC_CONTEXT
        if user is None:
            raise AuthError("Unauthorized", details="Missing authorization header")

        if use_documents:
            return await self._document_context(user.id)

        context = await self._manual_context(user.id)
        if context is None:
            raise NotFoundError("No user data found. Please add your information first.")
        return context

    async def _document_context(self, user_id: str) -> str:
        documents = await asyncio.to_thread(self._store.fetch_documents, user_id)
        if not documents:
            raise NotFoundError("No uploaded documents found. Please upload a resume first.")

        texts = [doc.parsed_text.strip() for doc in documents if doc.parsed_text and doc.parsed_text.strip()]
        if texts:
            return DOCUMENT_SEPARATOR.join(texts)

        logger.info("document_context_missing_text user=%s documents=%s", user_id, len(documents))
        context = await self._manual_context(user_id)
        if context is None:
            raise ValidationError(
                "No parsed text available from uploaded documents. Upload a TXT resume or use manual entry."
            )
        return context

    async def fetch_manual_records(self, user_id: str) -> ManualRecords:
        store = self._store
        profile, work, educations, skills = await asyncio.gather(
            asyncio.to_thread(store.fetch_profile, user_id),
            asyncio.to_thread(store.fetch_work_experiences, user_id),
            asyncio.to_thread(store.fetch_educations, user_id),
            asyncio.to_thread(store.fetch_skills, user_id),
        )
        return ManualRecords(profile=profile, work_experiences=work, educations=educations, skills=skills)

    async def _manual_context(self, user_id: str) -> str | None:
        records = await self.fetch_manual_records(user_id)
        if records.is_empty:
            return None
        return build_context_from_records(records)

    async def _persist(
        self,
        user: AuthenticatedUser | None,
        job_description: str,
        resume: TailoredResume,
    ) -> PersistOutcome:
        if self._store is None or user is None:
            return PersistOutcome()
        try:
            saved_id = await asyncio.to_thread(
                self._store.insert_generated_resume,
                user.id,
                job_description=job_description,
                tailored=resume.model_dump(mode="json", by_alias=True),
            )
        except PersistenceError as exc:
            logger.warning("generated_resume_save_failed user=%s: %s", user.id, exc.details or exc)
            return PersistOutcome(error=str(exc))
        return PersistOutcome(saved_id=saved_id)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)
