from __future__ import annotations

import json

TAILORING_INSTRUCTIONS = (
    "Map the candidate's skills and experience to the requirements of the job description.",
    "Prioritize ACHIEVEMENTS with quantifiable results over generic duties.",
    "Highlight the technical skills and tools the job description mentions.",
    "Adapt the professional summary to align with the role.",
    "Reorder and emphasize the experience and skills most relevant to the position.",
    "Optimize wording and structure so applicant tracking systems (ATS) parse the resume cleanly.",
)

OUTPUT_SCHEMA_EXAMPLE = {
    "summary": "A compelling 2-3 sentence professional summary tailored to this role",
    "workExperiences": [
        {
            "company": "Company Name",
            "jobTitle": "Job Title",
            "location": "City, State",
            "startDate": "YYYY-MM",
            "endDate": "YYYY-MM or Present",
            "highlights": [
                "Achievement-focused bullet point with quantifiable results",
                "Another achievement highlighting relevant skills from job description",
            ],
        }
    ],
    "skills": {
        "technical": ["Skill 1", "Skill 2"],
        "tools": ["Tool 1", "Tool 2"],
        "soft": ["Soft Skill 1", "Soft Skill 2"],
    },
    "education": [
        {
            "institution": "University Name",
            "degree": "Degree Type",
            "field": "Field of Study",
            "graduationDate": "YYYY-MM",
        }
    ],
    "matchScore": 85,
    "keyStrengths": ["Strength 1", "Strength 2", "Strength 3"],
    "recommendations": ["Recommendation 1", "Recommendation 2"],
}


def build_tailoring_prompt(context: str, job_description: str) -> str:
    instructions = "\n".join(f"{i}. {text}" for i, text in enumerate(TAILORING_INSTRUCTIONS, start=1))
    schema = json.dumps(OUTPUT_SCHEMA_EXAMPLE, indent=2)
    return (
        "You are an expert resume writer and career coach. Your task is to tailor a resume "
        "to match a specific job description while highlighting the candidate's most relevant achievements.\n\n"
        f"CANDIDATE BACKGROUND:\n{context.strip()}\n\n"
        f"TARGET JOB DESCRIPTION:\n{job_description.strip()}\n\n"
        f"INSTRUCTIONS:\n{instructions}\n\n"
        "OUTPUT FORMAT (JSON):\n"
        "Return a single JSON object with exactly this structure. matchScore is an integer from 0 to 100.\n"
        f"{schema}\n\n"
        "Focus on making the resume ATS-friendly while showcasing the candidate's unique value "
        "proposition for this specific role."
    )
