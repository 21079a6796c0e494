from __future__ import annotations

import logging

from resume_tailor.ai.config import AIConfig, load_ai_config
from resume_tailor.ai.types import CompletionModel

from resume_tailor.ai.providers.openai_provider import OpenAIProvider
from resume_tailor.ai.providers.gemini_provider import GeminiProvider
from resume_tailor.services.generators import DemoGenerator, LiveGenerator, ResumeGenerator

logger = logging.getLogger(__name__)


def get_completion_model(cfg: AIConfig | None = None) -> CompletionModel:
    cfg = cfg or load_ai_config()

    if cfg.provider == "openai":
        return OpenAIProvider(
            model=cfg.model,
            api_key=cfg.api_key,
            timeout_s=cfg.timeout_s,
            temperature=cfg.temperature,
        )

    if cfg.provider == "gemini":
        return GeminiProvider(
            model=cfg.model,
            api_key=cfg.api_key,
            timeout_s=cfg.timeout_s,
            temperature=cfg.temperature,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")


def build_resume_generator(cfg: AIConfig | None = None) -> ResumeGenerator:
    cfg = cfg or load_ai_config()
    if not cfg.is_configured:
        logger.info("resume_generator_mode mode=demo provider=%s", cfg.provider)
        return DemoGenerator()
    logger.info("resume_generator_mode mode=live provider=%s model=%s", cfg.provider, cfg.model)
    return LiveGenerator(get_completion_model(cfg), timeout_s=cfg.timeout_s)
