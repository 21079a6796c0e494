from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ManualIngestRequest(BaseModel):
    # Collections stay loosely typed here so one malformed collection is
    # reported per collection instead of rejecting the whole request.
    profile: Any = None
    work_experiences: Any = None
    educations: Any = None
    skills: Any = None


class ManualIngestResults(BaseModel):
    profile: Any = None
    work_experiences: list[Any] = Field(default_factory=list)
    educations: list[Any] = Field(default_factory=list)
    skills: list[Any] = Field(default_factory=list)


class ManualIngestResponse(BaseModel):
    success: bool = True
    demo: bool = False
    message: str
    results: ManualIngestResults


class PartialIngestResponse(BaseModel):
    error: str = "Partial failure during data ingestion"
    details: list[str]
    results: ManualIngestResults


class DocumentOut(BaseModel):
    id: str
    file_url: str
    uploaded_at: str
    has_parsed_text: bool


class DocumentUploadResponse(BaseModel):
    success: bool = True
    demo: bool = False
    message: str
    data: DocumentOut


class DocumentListResponse(BaseModel):
    success: bool = True
    demo: bool = False
    documents: list[dict[str, Any]] = Field(default_factory=list)
