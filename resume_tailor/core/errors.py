from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ResumeTailorError(RuntimeError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, details: Any = None):
        super().__init__(message)
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": str(self)}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(ResumeTailorError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(ResumeTailorError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(ResumeTailorError):
    status_code = status.HTTP_404_NOT_FOUND


class UpstreamError(ResumeTailorError):
    pass


class ParseError(ResumeTailorError):
    def __init__(self, message: str, *, raw_response: str, details: Any = None):
        super().__init__(message, details=details)
        self.raw_response = raw_response

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["rawResponse"] = self.raw_response
        return payload


class PersistenceError(ResumeTailorError):
    pass


class StorageError(ResumeTailorError):
    pass


async def resume_tailor_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _ = request
    if not isinstance(exc, ResumeTailorError):  # pragma: no cover - registered for ResumeTailorError only
        raise exc
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
