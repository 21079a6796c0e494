import os
from dataclasses import dataclass

_DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
}

_API_KEY_ENV = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
}


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    api_key: str | None
    timeout_s: float
    temperature: float

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and not looks_like_placeholder(self.api_key or "")


def looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return (
        lower.startswith("your_")
        or lower.startswith("replace_")
        or "placeholder" in lower
        or lower in {"changeme", "todo"}
    )


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_ai_config() -> AIConfig:
    provider = (os.getenv("AI_PROVIDER") or "gemini").strip().lower()
    model = (os.getenv("AI_MODEL") or "").strip() or _DEFAULT_MODELS.get(provider, "")
    key_env = _API_KEY_ENV.get(provider)
    api_key = (os.getenv(key_env) or "").strip() if key_env else ""
    return AIConfig(
        provider=provider,
        model=model,
        api_key=api_key or None,
        timeout_s=_float_env("AI_TIMEOUT_S", 60.0),
        temperature=_float_env("AI_TEMPERATURE", 0.4),
    )
