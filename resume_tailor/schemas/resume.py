from __future__ import annotations

import math
import re
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_SCORE_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*%?\s*$")


def _as_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _as_optional_text(value: Any) -> Any:
    text = _as_text(value)
    if isinstance(text, str) and not text:
        return None
    return text


def _as_text_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        items = [_as_text(item) for item in value if item is not None]
        return [item for item in items if item != ""]
    return value


def _as_list(value: Any) -> Any:
    return [] if value is None else value


def clamp_match_score(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError("matchScore must be a number")
    if isinstance(value, int):
        return max(0, min(100, value))
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        match = _SCORE_RE.match(value)
        if not match:
            raise ValueError("matchScore must be a number")
        number = float(match.group(1))
    else:
        raise ValueError("matchScore must be a number")
    if math.isnan(number):
        raise ValueError("matchScore must be a number")
    if math.isinf(number):
        return 100 if number > 0 else 0
    return max(0, min(100, int(round(number))))


Text = Annotated[str, BeforeValidator(_as_text)]
OptionalText = Annotated[str | None, BeforeValidator(_as_optional_text)]
TextList = Annotated[list[str], BeforeValidator(_as_text_list)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ResumeWorkExperience(CamelModel):
    company: Text = ""
    job_title: Text = ""
    location: OptionalText = None
    start_date: Text = ""
    end_date: Text = ""
    highlights: TextList = Field(default_factory=list)


class ResumeSkills(CamelModel):
    technical: TextList = Field(default_factory=list)
    tools: TextList = Field(default_factory=list)
    soft: TextList = Field(default_factory=list)


class ResumeEducation(CamelModel):
    institution: Text = ""
    degree: Text = ""
    field: OptionalText = None
    graduation_date: Text = ""


class TailoredResume(CamelModel):
    """Structured resume produced for one job description.

    List sections are always lists and ``match_score`` is always an integer
    in [0, 100], whatever shape the model returned.
    """

    summary: Text = ""
    work_experiences: Annotated[list[ResumeWorkExperience], BeforeValidator(_as_list)] = Field(default_factory=list)
    skills: ResumeSkills = Field(default_factory=ResumeSkills)
    education: Annotated[list[ResumeEducation], BeforeValidator(_as_list)] = Field(default_factory=list)
    match_score: int = 0
    key_strengths: TextList = Field(default_factory=list)
    recommendations: TextList = Field(default_factory=list)

    @field_validator("skills", mode="before")
    @classmethod
    def skills_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("match_score", mode="before")
    @classmethod
    def match_score_in_range(cls, value: Any) -> int:
        return clamp_match_score(value)
