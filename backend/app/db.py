"""SQLite database layer — thin wrapper around sqlite3, no ORM."""

from __future__ import annotations

import os
import sqlite3
import time
from typing import Any
from uuid import uuid4

from app.config import settings

_SCHEMA = """
CREATE TABLE IF NOT EXISTS wound_reports (
    id TEXT PRIMARY KEY,
    patient_name TEXT NOT NULL DEFAULT '',
    room_no TEXT NOT NULL DEFAULT '',
    date_of_discovery TEXT NOT NULL DEFAULT '',
    fac_hosp TEXT NOT NULL DEFAULT '',
    type_stage TEXT NOT NULL DEFAULT '',
    is_no_stage BOOLEAN NOT NULL DEFAULT FALSE,
    site TEXT NOT NULL DEFAULT '',
    color_drainage TEXT NOT NULL DEFAULT '',
    undermining TEXT NOT NULL DEFAULT '',
    week1 TEXT NOT NULL DEFAULT '',
    week2 TEXT NOT NULL DEFAULT '',
    week3 TEXT NOT NULL DEFAULT '',
    week4 TEXT NOT NULL DEFAULT '',
    current_treatment TEXT NOT NULL DEFAULT '',
    comment TEXT NOT NULL DEFAULT '',
    created_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_wound_reports_created_at ON wound_reports (created_at);
"""

# Descriptive columns written by create/update; id and created_at are managed here.
REPORT_FIELDS = (
    "patient_name", "room_no", "date_of_discovery", "fac_hosp", "type_stage",
    "is_no_stage", "site", "color_drainage", "undermining",
    "week1", "week2", "week3", "week4", "current_treatment", "comment",
)


def _db_path() -> str:
    """Derive the SQLite file path from DATABASE_URL."""
    url = settings.DATABASE_URL
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "")
    return os.path.join(settings.DATA_DIR, "woundreport.db")


def _now_ms() -> int:
    return int(time.time() * 1000)


def init_db() -> None:
    """Create tables if they do not exist."""
    path = _db_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    conn = sqlite3.connect(path)
    conn.executescript(_SCHEMA)
    conn.commit()
    conn.close()


def get_db() -> sqlite3.Connection:
    """Return a new connection with row_factory set to sqlite3.Row."""
    conn = sqlite3.connect(_db_path())
    conn.row_factory = sqlite3.Row
    return conn


def _row_to_dict(row: sqlite3.Row | None) -> dict[str, Any] | None:
    if row is None:
        return None
    result = dict(row)
    result["is_no_stage"] = bool(result.get("is_no_stage"))
    for field in REPORT_FIELDS:
        if result.get(field) is None:
            result[field] = ""
    return result


def _field_values(data: dict[str, Any]) -> list[Any]:
    values: list[Any] = []
    for field in REPORT_FIELDS:
        if field == "is_no_stage":
            values.append(bool(data.get(field, False)))
        else:
            values.append(data.get(field) or "")
    return values


# ---------------------------------------------------------------------------
# Wound reports
# ---------------------------------------------------------------------------

def create_report(data: dict[str, Any], *, created_at: int | None = None) -> dict[str, Any]:
    report_id = uuid4().hex
    created = created_at if created_at is not None else _now_ms()
    cols = ", ".join(("id",) + REPORT_FIELDS + ("created_at",))
    placeholders = ", ".join("?" * (len(REPORT_FIELDS) + 2))
    conn = get_db()
    try:
        conn.execute(
            f"INSERT INTO wound_reports ({cols}) VALUES ({placeholders})",
            [report_id, *_field_values(data), created],
        )
        conn.commit()
    finally:
        conn.close()
    return get_report(report_id)  # type: ignore[return-value]


def get_report(report_id: str) -> dict[str, Any] | None:
    conn = get_db()
    try:
        row = conn.execute("SELECT * FROM wound_reports WHERE id = ?", (report_id,)).fetchone()
        return _row_to_dict(row)
    finally:
        conn.close()


def get_all_reports() -> list[dict[str, Any]]:
    """Return every stored snapshot; the resolver decides what is shown."""
    conn = get_db()
    try:
        rows = conn.execute("SELECT * FROM wound_reports ORDER BY created_at DESC").fetchall()
        return [_row_to_dict(r) for r in rows]  # type: ignore[misc]
    finally:
        conn.close()


def update_report(report_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
    """Replace every descriptive field of a report and stamp it as the newest snapshot."""
    assignments = ", ".join(f"{field} = ?" for field in REPORT_FIELDS)
    conn = get_db()
    try:
        cur = conn.execute(
            f"UPDATE wound_reports SET {assignments}, created_at = ? WHERE id = ?",
            [*_field_values(data), _now_ms(), report_id],
        )
        conn.commit()
        if cur.rowcount == 0:
            return None
    finally:
        conn.close()
    return get_report(report_id)


def delete_report(report_id: str) -> bool:
    conn = get_db()
    try:
        cur = conn.execute("DELETE FROM wound_reports WHERE id = ?", (report_id,))
        conn.commit()
        return cur.rowcount > 0
    finally:
        conn.close()
