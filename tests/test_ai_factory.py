import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_tailor.ai.config import AIConfig, load_ai_config, looks_like_placeholder
from resume_tailor.ai.factory import build_resume_generator, get_completion_model
from resume_tailor.ai.providers.openai_provider import OpenAIProvider
from resume_tailor.services.generators import DemoGenerator, LiveGenerator


def _config(provider: str = "openai", api_key: str | None = "sk-test-123") -> AIConfig:
    return AIConfig(provider=provider, model="gpt-4o-mini", api_key=api_key, timeout_s=5.0, temperature=0.2)


def test_placeholder_keys_count_as_unset() -> None:
    assert looks_like_placeholder("your_api_key_here")
    assert looks_like_placeholder("PLACEHOLDER")
    assert not looks_like_placeholder("sk-live-abc")
    assert not _config(api_key="your_openai_key").is_configured


def test_missing_key_selects_demo_generator() -> None:
    assert isinstance(build_resume_generator(_config(api_key=None)), DemoGenerator)


def test_configured_key_selects_live_generator() -> None:
    generator = build_resume_generator(_config())
    assert isinstance(generator, LiveGenerator)
    assert not generator.is_demo


def test_openai_provider_is_built_for_openai() -> None:
    assert isinstance(get_completion_model(_config()), OpenAIProvider)


def test_unknown_provider_is_rejected() -> None:
    with pytest.raises(ValueError):
        get_completion_model(_config(provider="mystery"))


def test_load_ai_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AI_PROVIDER", "OpenAI")
    monkeypatch.setenv("OPENAI_API_KEY", " sk-env ")
    monkeypatch.setenv("AI_TIMEOUT_S", "not-a-number")
    monkeypatch.delenv("AI_MODEL", raising=False)

    cfg = load_ai_config()

    assert cfg.provider == "openai"
    assert cfg.model == "gpt-4o-mini"
    assert cfg.api_key == "sk-env"
    assert cfg.timeout_s == 60.0
