from __future__ import annotations

import logging
import re
import time
from pathlib import Path

from resume_tailor.core.errors import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_filename(filename: str) -> str:
    name = _UNSAFE_CHARS_RE.sub("_", (filename or "").strip())
    return name or "upload"


def build_object_key(user_id: str, filename: str, *, now_ms: int | None = None) -> str:
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{sanitize_filename(user_id)}/{timestamp}_{sanitize_filename(filename)}"


class LocalFileStore:
    """Object store for uploaded resumes, kept on local disk and served under a public prefix."""

    def __init__(self, root: str | Path, public_base_url: str = "/files"):
        self._root = Path(root)
        self._public_base_url = public_base_url.rstrip("/")

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root.resolve() not in path.parents:
            raise StorageError("Invalid storage key", details=key)
        return path

    def public_url(self, key: str) -> str:
        return f"{self._public_base_url}/{key}"

    def save(self, key: str, data: bytes) -> str:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # "xb" refuses to overwrite an existing object.
            with path.open("xb") as handle:
                handle.write(data)
        except OSError as exc:
            logger.warning("file_store_save_failed key=%s: %s", key, exc)
            raise StorageError("Failed to upload file", details=str(exc)) from exc
        return self.public_url(key)

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("file_store_remove_failed key=%s: %s", key, exc)
            raise StorageError("Failed to remove file", details=str(exc)) from exc

    def exists(self, key: str) -> bool:
        return self._path_for(key).exists()
