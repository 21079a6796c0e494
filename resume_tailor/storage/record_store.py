from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Protocol, Sequence, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from resume_tailor.core.errors import PersistenceError
from resume_tailor.schemas.records import (
    Education,
    EducationIn,
    Profile,
    ProfileIn,
    Skill,
    SkillIn,
    StoredDocument,
    WorkExperience,
    WorkExperienceIn,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStore(Protocol):
    def fetch_profile(self, user_id: str) -> Profile | None: ...

    def fetch_work_experiences(self, user_id: str) -> list[WorkExperience]: ...

    def fetch_educations(self, user_id: str) -> list[Education]: ...

    def fetch_skills(self, user_id: str) -> list[Skill]: ...

    def fetch_documents(self, user_id: str) -> list[StoredDocument]: ...

    def upsert_profile(self, user_id: str, profile: ProfileIn) -> dict[str, Any]: ...

    def insert_work_experiences(self, user_id: str, items: Sequence[WorkExperienceIn]) -> list[dict[str, Any]]: ...

    def insert_educations(self, user_id: str, items: Sequence[EducationIn]) -> list[dict[str, Any]]: ...

    def insert_skills(self, user_id: str, items: Sequence[SkillIn]) -> list[dict[str, Any]]: ...

    def insert_document(self, user_id: str, *, file_url: str, storage_key: str, parsed_text: str | None) -> dict[str, Any]: ...

    def insert_generated_resume(self, user_id: str, *, job_description: str, tailored: dict[str, Any]) -> str: ...


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        full_name TEXT,
        date_of_birth TEXT,
        phone TEXT,
        email TEXT,
        linkedin_url TEXT,
        portfolio_url TEXT,
        summary_bio TEXT,
        languages_json TEXT NOT NULL DEFAULT '[]',
        certifications_json TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS work_experiences (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        company TEXT NOT NULL,
        job_title TEXT NOT NULL,
        location TEXT,
        start_date TEXT NOT NULL,
        end_date TEXT,
        is_current INTEGER NOT NULL DEFAULT 0,
        duties TEXT,
        achievements TEXT,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS educations (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        institution TEXT NOT NULL,
        degree TEXT NOT NULL,
        field_of_study TEXT,
        start_date TEXT NOT NULL,
        end_date TEXT,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS skills (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        category TEXT NOT NULL,
        proficiency INTEGER,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS uploaded_documents (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        file_url TEXT NOT NULL,
        storage_key TEXT NOT NULL,
        parsed_text TEXT,
        uploaded_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS generated_resumes (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        target_job_description TEXT NOT NULL,
        tailored_json TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_work_experiences_user ON work_experiences (user_id, start_date);",
    "CREATE INDEX IF NOT EXISTS idx_educations_user ON educations (user_id, start_date);",
    "CREATE INDEX IF NOT EXISTS idx_skills_user ON skills (user_id);",
    "CREATE INDEX IF NOT EXISTS idx_uploaded_documents_user ON uploaded_documents (user_id, uploaded_at);",
    "CREATE INDEX IF NOT EXISTS idx_generated_resumes_user ON generated_resumes (user_id, created_at);",
)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _json_list(raw: str | None, column: str, row_id: str) -> list[Any]:
    try:
        value = json.loads(raw or "[]")
    except json.JSONDecodeError as exc:
        logger.warning("record_column_unreadable table=profiles column=%s id=%s: %s", column, row_id, exc)
        return []
    return value if isinstance(value, list) else []


def _coerce_rows(model: type[RecordT], rows: list[dict[str, Any]], table: str) -> list[RecordT]:
    records: list[RecordT] = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except PydanticValidationError as exc:
            logger.warning("record_row_skipped table=%s id=%s: %s", table, row.get("id"), exc.error_count())
    return records


class SQLiteRecordStore:
    """Record store backed by a single SQLite file.

    Every public method is safe to call from worker threads; one connection
    is shared and serialised behind a lock. Multi-row inserts commit as a
    unit per collection.
    """

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        directory = os.path.dirname(self._db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            self._db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        self._conn = conn
        return conn

    def _run(self, operation: str, fn: Callable[[sqlite3.Connection], T]) -> T:
        with self._lock:
            try:
                return fn(self._connection())
            except sqlite3.Error as exc:
                logger.warning("record_store_failed op=%s: %s", operation, exc)
                raise PersistenceError(f"Failed to {operation}", details=str(exc)) from exc

    def _transaction(self, operation: str, fn: Callable[[sqlite3.Connection], T]) -> T:
        def wrapped(conn: sqlite3.Connection) -> T:
            conn.execute("BEGIN IMMEDIATE")
            try:
                result = fn(conn)
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
            return result

        return self._run(operation, wrapped)

    def _select(self, operation: str, sql: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        return self._run(operation, lambda conn: [dict(row) for row in conn.execute(sql, params).fetchall()])

    def init_schema(self) -> None:
        def create(conn: sqlite3.Connection) -> None:
            for statement in _SCHEMA:
                conn.execute(statement)

        self._run("initialise record store", create)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def fetch_profile(self, user_id: str) -> Profile | None:
        rows = self._select("fetch profile", "SELECT * FROM profiles WHERE id = ?", (user_id,))
        if not rows:
            return None
        row = rows[0]
        row["languages"] = _json_list(row.pop("languages_json"), "languages_json", user_id)
        row["certifications"] = _json_list(row.pop("certifications_json"), "certifications_json", user_id)
        profiles = _coerce_rows(Profile, [row], "profiles")
        return profiles[0] if profiles else None

    def fetch_work_experiences(self, user_id: str) -> list[WorkExperience]:
        rows = self._select(
            "fetch work experiences",
            "SELECT * FROM work_experiences WHERE user_id = ? ORDER BY start_date DESC, rowid ASC",
            (user_id,),
        )
        for row in rows:
            row["is_current"] = bool(row.get("is_current"))
        return _coerce_rows(WorkExperience, rows, "work_experiences")

    def fetch_educations(self, user_id: str) -> list[Education]:
        rows = self._select(
            "fetch educations",
            "SELECT * FROM educations WHERE user_id = ? ORDER BY start_date DESC, rowid ASC",
            (user_id,),
        )
        return _coerce_rows(Education, rows, "educations")

    def fetch_skills(self, user_id: str) -> list[Skill]:
        rows = self._select("fetch skills", "SELECT * FROM skills WHERE user_id = ? ORDER BY rowid ASC", (user_id,))
        return _coerce_rows(Skill, rows, "skills")

    def fetch_documents(self, user_id: str) -> list[StoredDocument]:
        rows = self._select(
            "fetch documents",
            "SELECT * FROM uploaded_documents WHERE user_id = ? ORDER BY uploaded_at DESC, rowid DESC",
            (user_id,),
        )
        return _coerce_rows(StoredDocument, rows, "uploaded_documents")

    def upsert_profile(self, user_id: str, profile: ProfileIn) -> dict[str, Any]:
        now = _utc_now()
        data = profile.model_dump(mode="json")
        languages = data.pop("languages", [])
        certifications = data.pop("certifications", [])

        def write(conn: sqlite3.Connection) -> dict[str, Any]:
            conn.execute(
                """
                INSERT INTO profiles (
                    id, full_name, date_of_birth, phone, email, linkedin_url, portfolio_url,
                    summary_bio, languages_json, certifications_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    full_name = excluded.full_name,
                    date_of_birth = excluded.date_of_birth,
                    phone = excluded.phone,
                    email = excluded.email,
                    linkedin_url = excluded.linkedin_url,
                    portfolio_url = excluded.portfolio_url,
                    summary_bio = excluded.summary_bio,
                    languages_json = excluded.languages_json,
                    certifications_json = excluded.certifications_json,
                    updated_at = excluded.updated_at
                """,
                (
                    user_id,
                    data["full_name"],
                    data["date_of_birth"],
                    data["phone"],
                    data["email"],
                    data["linkedin_url"],
                    data["portfolio_url"],
                    data["summary_bio"],
                    json.dumps(languages, ensure_ascii=False),
                    json.dumps(certifications, ensure_ascii=False),
                    now,
                    now,
                ),
            )
            created_at = conn.execute("SELECT created_at FROM profiles WHERE id = ?", (user_id,)).fetchone()[0]
            return {
                "id": user_id,
                **data,
                "languages": languages,
                "certifications": certifications,
                "created_at": created_at,
                "updated_at": now,
            }

        return self._transaction("upsert profile", write)

    def _insert_many(self, operation: str, table: str, user_id: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        now = _utc_now()
        stored = [{"id": _new_id(), "user_id": user_id, **row, "created_at": now} for row in rows]

        def write(conn: sqlite3.Connection) -> list[dict[str, Any]]:
            for row in stored:
                columns = ", ".join(row)
                placeholders = ", ".join("?" for _ in row)
                conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", tuple(row.values()))
            return stored

        return self._transaction(operation, write)

    def insert_work_experiences(self, user_id: str, items: Sequence[WorkExperienceIn]) -> list[dict[str, Any]]:
        rows = [item.model_dump(mode="json") for item in items]
        for row in rows:
            row["is_current"] = int(bool(row["is_current"]))
        return self._insert_many("insert work experiences", "work_experiences", user_id, rows)

    def insert_educations(self, user_id: str, items: Sequence[EducationIn]) -> list[dict[str, Any]]:
        rows = [item.model_dump(mode="json") for item in items]
        return self._insert_many("insert educations", "educations", user_id, rows)

    def insert_skills(self, user_id: str, items: Sequence[SkillIn]) -> list[dict[str, Any]]:
        rows = [item.model_dump(mode="json") for item in items]
        return self._insert_many("insert skills", "skills", user_id, rows)

    def insert_document(self, user_id: str, *, file_url: str, storage_key: str, parsed_text: str | None) -> dict[str, Any]:
        row = {
            "id": _new_id(),
            "user_id": user_id,
            "file_url": file_url,
            "storage_key": storage_key,
            "parsed_text": parsed_text,
            "uploaded_at": _utc_now(),
        }

        def write(conn: sqlite3.Connection) -> dict[str, Any]:
            conn.execute(
                """
                INSERT INTO uploaded_documents (id, user_id, file_url, storage_key, parsed_text, uploaded_at)
                VALUES (:id, :user_id, :file_url, :storage_key, :parsed_text, :uploaded_at)
                """,
                row,
            )
            return row

        return self._transaction("save document reference", write)

    def insert_generated_resume(self, user_id: str, *, job_description: str, tailored: dict[str, Any]) -> str:
        resume_id = _new_id()

        def write(conn: sqlite3.Connection) -> str:
            conn.execute(
                """
                INSERT INTO generated_resumes (id, user_id, target_job_description, tailored_json, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (resume_id, user_id, job_description, json.dumps(tailored, ensure_ascii=False), _utc_now()),
            )
            return resume_id

        return self._transaction("save generated resume", write)
