from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from resume_tailor.schemas.records import Education, Profile, Skill, WorkExperience

NO_BACKGROUND_CONTEXT = "No background information provided."

# Hard and Technical are synonyms for the same bucket.
_SKILL_BUCKETS = {
    "hard": "technical",
    "technical": "technical",
    "tool": "tools",
    "soft": "soft",
}
_BUCKET_LABELS = (
    ("technical", "Technical Skills"),
    ("tools", "Tools"),
    ("soft", "Soft Skills"),
)


@dataclass(frozen=True)
class ManualRecords:
    profile: Profile | None = None
    work_experiences: Sequence[WorkExperience] = field(default_factory=tuple)
    educations: Sequence[Education] = field(default_factory=tuple)
    skills: Sequence[Skill] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return (
            self.profile is None
            and not self.work_experiences
            and not self.educations
            and not self.skills
        )


def _profile_lines(profile: Profile) -> list[str]:
    lines = ["PROFILE:"]
    for label, value in (
        ("Name", profile.full_name),
        ("Email", profile.email),
        ("Phone", profile.phone),
        ("LinkedIn", profile.linkedin_url),
        ("Portfolio", profile.portfolio_url),
    ):
        if value:
            lines.append(f"{label}: {value}")
    if profile.summary_bio:
        lines.append(f"Summary: {profile.summary_bio}")

    languages = []
    for lang in profile.languages:
        if not lang.language:
            continue
        languages.append(f"{lang.language} ({lang.level})" if lang.level else lang.language)
    if languages:
        lines.append(f"Languages: {', '.join(languages)}")

    certifications = [cert for cert in profile.certifications if cert.name]
    if certifications:
        lines.append("Certifications:")
        for cert in certifications:
            line = f"- {cert.name}"
            if cert.issuer:
                line += f" by {cert.issuer}"
            if cert.year:
                line += f" ({cert.year})"
            lines.append(line)
    return lines


def _duration(start: str | None, end: str | None) -> str:
    return f"{start or 'Unknown'} to {end or 'Present'}"


def _work_lines(work_experiences: Sequence[WorkExperience]) -> list[str]:
    lines = ["WORK EXPERIENCE:"]
    for exp in work_experiences:
        lines.append("")
        lines.append(f"{exp.job_title or 'Position'} at {exp.company or 'Company'}")
        if exp.location:
            lines.append(f"Location: {exp.location}")
        end = None if exp.is_current else exp.end_date
        lines.append(f"Duration: {_duration(exp.start_date, end)}")
        if exp.duties:
            lines.append(f"Duties: {exp.duties}")
        if exp.achievements:
            # Label must match the ACHIEVEMENTS keyword in TAILORING_INSTRUCTIONS.
            lines.append(f"ACHIEVEMENTS: {exp.achievements}")
    return lines


def _education_lines(educations: Sequence[Education]) -> list[str]:
    lines = ["EDUCATION:"]
    for edu in educations:
        degree = edu.degree or "Degree"
        lines.append("")
        lines.append(f"{degree} in {edu.field_of_study}" if edu.field_of_study else degree)
        lines.append(edu.institution or "Institution")
        lines.append(_duration(edu.start_date, edu.end_date))
    return lines


def _skill_lines(skills: Sequence[Skill]) -> list[str]:
    buckets: dict[str, list[str]] = {key: [] for key, _ in _BUCKET_LABELS}
    for skill in skills:
        bucket = _SKILL_BUCKETS.get((skill.category or "").strip().lower())
        if bucket and skill.name:
            buckets[bucket].append(skill.name)

    lines = ["SKILLS:"]
    for key, label in _BUCKET_LABELS:
        if buckets[key]:
            lines.append(f"{label}: {', '.join(buckets[key])}")
    return lines


def build_context(
    profile: Profile | None,
    work_experiences: Sequence[WorkExperience],
    educations: Sequence[Education],
    skills: Sequence[Skill],
) -> str:
    """Flatten a user's career records into the background block of the prompt.

    Sections appear in the fixed order PROFILE, WORK EXPERIENCE, EDUCATION,
    SKILLS and only when their source is present. With nothing to render the
    fixed ``NO_BACKGROUND_CONTEXT`` sentence is returned instead of "".
    """
    sections: list[list[str]] = []
    if profile is not None:
        sections.append(_profile_lines(profile))
    if work_experiences:
        sections.append(_work_lines(work_experiences))
    if educations:
        sections.append(_education_lines(educations))
    if skills:
        sections.append(_skill_lines(skills))

    if not sections:
        return NO_BACKGROUND_CONTEXT
    return "\n\n".join("\n".join(lines) for lines in sections).strip()


def build_context_from_records(records: ManualRecords) -> str:
    return build_context(records.profile, records.work_experiences, records.educations, records.skills)
