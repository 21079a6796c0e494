from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from resume_tailor.schemas.records import Education, Profile, Skill, WorkExperience
from resume_tailor.schemas.resume import CamelModel, TailoredResume


class InlineRecords(BaseModel):
    profile: Profile | None = None
    work_experiences: list[WorkExperience] = Field(default_factory=list)
    educations: list[Education] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)


class GenerateRequest(CamelModel):
    job_description: str | None = Field(default=None, max_length=50000)
    use_documents: bool = False
    demo_data: InlineRecords | None = None


class GenerateResponse(CamelModel):
    success: bool = True
    demo: bool = False
    message: str | None = None
    tailored_resume: TailoredResume
    saved_resume_id: str | None = None
    generated_at: datetime
