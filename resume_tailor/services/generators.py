from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

from resume_tailor.ai.types import CompletionModel
from resume_tailor.core.errors import UpstreamError
from resume_tailor.schemas.resume import TailoredResume
from resume_tailor.services.response_parser import parse_tailored_resume

logger = logging.getLogger(__name__)

DEMO_MESSAGE = "Demo mode: configure an AI provider API key for real AI generation."

DEMO_RESUME = {
    "summary": (
        "Experienced professional with a proven track record of delivering results. "
        "Skilled in problem-solving, communication, and team collaboration. "
        "Seeking to leverage expertise in a challenging new role."
    ),
    "workExperiences": [
        {
            "company": "Your Company",
            "jobTitle": "Your Role",
            "location": "City, State",
            "startDate": "2020-01",
            "endDate": "Present",
            "highlights": [
                "Led initiatives that improved team productivity by 25%",
                "Collaborated with cross-functional teams to deliver projects on time",
                "Implemented best practices that reduced errors by 40%",
            ],
        }
    ],
    "skills": {
        "technical": ["JavaScript", "TypeScript", "React", "Node.js"],
        "tools": ["Git", "VS Code", "Jira", "Figma"],
        "soft": ["Leadership", "Communication", "Problem Solving"],
    },
    "education": [
        {
            "institution": "University",
            "degree": "Bachelor's Degree",
            "field": "Computer Science",
            "graduationDate": "2019-05",
        }
    ],
    "matchScore": 75,
    "keyStrengths": ["Technical Skills", "Problem Solving", "Team Player"],
    "recommendations": [
        "Add more quantifiable achievements to strengthen your resume",
        "Include specific technologies mentioned in the job description",
        "Configure the record store and an AI provider for personalized tailoring",
    ],
}


class ResumeGenerator(Protocol):
    is_demo: bool

    async def generate(self, prompt: str) -> TailoredResume: ...


class DemoGenerator:
    is_demo = True

    async def generate(self, prompt: str) -> TailoredResume:
        _ = prompt
        return TailoredResume.model_validate(DEMO_RESUME)


class LiveGenerator:
    """Runs one blocking model call off the event loop, bounded by ``timeout_s``."""

    is_demo = False

    def __init__(self, model: CompletionModel, *, timeout_s: float = 60.0):
        self._model = model
        self._timeout_s = timeout_s

    async def complete(self, prompt: str) -> str:
        started = time.perf_counter()
        try:
            text = await asyncio.wait_for(asyncio.to_thread(self._model.generate, prompt), timeout=self._timeout_s)
        except asyncio.TimeoutError as exc:
            logger.warning("model_call_timeout timeout_s=%s", self._timeout_s)
            raise UpstreamError("AI generation timed out", details=f"No response within {self._timeout_s:g}s") from exc
        except Exception as exc:  # noqa: BLE001 - any SDK failure is an upstream failure
            logger.warning("model_call_failed prompt_len=%s: %s", len(prompt), exc)
            raise UpstreamError("AI generation failed", details=str(exc)) from exc

        logger.info(
            "model_call_completed latency_ms=%s response_len=%s",
            int((time.perf_counter() - started) * 1000),
            len(text or ""),
        )
        return text or ""

    async def generate(self, prompt: str) -> TailoredResume:
        return parse_tailored_resume(await self.complete(prompt))
