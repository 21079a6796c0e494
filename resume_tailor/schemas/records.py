"""Career records as read from the record store or supplied inline.

Read models are lenient: every field is optional so partially filled rows
still render. The ``*In`` variants used for ingestion enforce the fields a
stored row must carry.
"""
from __future__ import annotations

from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator

SKILL_CATEGORIES = {"hard": "Hard", "technical": "Technical", "tool": "Tool", "soft": "Soft"}


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        text = value.strip()
        return text or None
    return value


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]
RequiredText = Annotated[str, BeforeValidator(_blank_to_none), Field(min_length=1)]

_TITLE = AliasChoices("job_title", "jobTitle", "role", "title")
_START = AliasChoices("start_date", "startDate", "start")
_END = AliasChoices("end_date", "endDate", "end")
_INSTITUTION = AliasChoices("institution", "school")


class RecordModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Language(RecordModel):
    language: OptionalText = Field(default=None, validation_alias=AliasChoices("language", "name"))
    level: OptionalText = Field(default=None, validation_alias=AliasChoices("level", "proficiency"))


class Certification(RecordModel):
    name: OptionalText = None
    issuer: OptionalText = None
    year: OptionalText = None


class Profile(RecordModel):
    full_name: OptionalText = Field(default=None, validation_alias=AliasChoices("full_name", "fullName", "name"))
    email: OptionalText = None
    phone: OptionalText = None
    date_of_birth: OptionalText = None
    linkedin_url: OptionalText = Field(default=None, validation_alias=AliasChoices("linkedin_url", "linkedin"))
    portfolio_url: OptionalText = Field(default=None, validation_alias=AliasChoices("portfolio_url", "portfolio"))
    summary_bio: OptionalText = Field(default=None, validation_alias=AliasChoices("summary_bio", "summary", "bio"))
    languages: Annotated[list[Language], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    certifications: Annotated[list[Certification], BeforeValidator(_none_to_list)] = Field(default_factory=list)


class WorkExperience(RecordModel):
    company: OptionalText = None
    job_title: OptionalText = Field(default=None, validation_alias=_TITLE)
    location: OptionalText = None
    start_date: OptionalText = Field(default=None, validation_alias=_START)
    end_date: OptionalText = Field(default=None, validation_alias=_END)
    is_current: bool = False
    duties: OptionalText = None
    achievements: OptionalText = None


class Education(RecordModel):
    institution: OptionalText = Field(default=None, validation_alias=_INSTITUTION)
    degree: OptionalText = None
    field_of_study: OptionalText = Field(
        default=None,
        validation_alias=AliasChoices("field_of_study", "fieldOfStudy", "field"),
    )
    start_date: OptionalText = Field(default=None, validation_alias=_START)
    end_date: OptionalText = Field(default=None, validation_alias=_END)


class Skill(RecordModel):
    name: OptionalText = None
    category: OptionalText = None
    proficiency: int | None = None


class ProfileIn(Profile):
    pass


class WorkExperienceIn(WorkExperience):
    company: RequiredText
    job_title: RequiredText = Field(validation_alias=_TITLE)
    start_date: RequiredText = Field(validation_alias=_START)


class EducationIn(Education):
    institution: RequiredText = Field(validation_alias=_INSTITUTION)
    degree: RequiredText
    start_date: RequiredText = Field(validation_alias=_START)


class SkillIn(Skill):
    name: RequiredText
    category: RequiredText
    proficiency: int | None = Field(default=None, ge=0, le=100)

    @field_validator("category")
    @classmethod
    def known_category(cls, value: str) -> str:
        canonical = SKILL_CATEGORIES.get(value.lower())
        if canonical is None:
            raise ValueError("category must be one of Hard, Technical, Tool, Soft")
        return canonical


class StoredDocument(RecordModel):
    id: str
    file_url: str
    parsed_text: str | None = None
    uploaded_at: str
