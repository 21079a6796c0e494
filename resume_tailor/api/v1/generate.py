from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from resume_tailor.api.deps import get_current_user, get_tailoring_service
from resume_tailor.core.config import settings
from resume_tailor.core.rate_limit import rate_limit
from resume_tailor.core.security import AuthenticatedUser
from resume_tailor.schemas.generate import GenerateRequest, GenerateResponse
from resume_tailor.services.context_builder import ManualRecords
from resume_tailor.services.generators import DEMO_MESSAGE
from resume_tailor.services.tailoring_service import TailoringService

router = APIRouter()


@router.post("/generate", response_model=GenerateResponse)
@rate_limit(settings.generate_rate_limit)
async def generate_resume(
    request: Request,
    payload: GenerateRequest,
    user: AuthenticatedUser | None = Depends(get_current_user),
    service: TailoringService = Depends(get_tailoring_service),
):
    _ = request
    inline = payload.demo_data
    inline_records = None
    if inline is not None:
        inline_records = ManualRecords(
            profile=inline.profile,
            work_experiences=tuple(inline.work_experiences),
            educations=tuple(inline.educations),
            skills=tuple(inline.skills),
        )

    outcome = await service.tailor(
        payload.job_description,
        user=user,
        use_documents=payload.use_documents,
        inline_records=inline_records,
    )
    return GenerateResponse(
        demo=outcome.demo,
        message=DEMO_MESSAGE if outcome.demo else None,
        tailored_resume=outcome.resume,
        saved_resume_id=outcome.persist.saved_id,
        generated_at=outcome.generated_at,
    )
