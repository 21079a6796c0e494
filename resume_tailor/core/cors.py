from __future__ import annotations

from resume_tailor.core.config import settings


def cors_allowed_origins() -> list[str]:
    return list(settings.cors_allowed_origins)


def cors_allow_credentials() -> bool:
    # Browsers reject credentialed responses for a wildcard origin.
    return settings.cors_allow_credentials and "*" not in settings.cors_allowed_origins
