import json
import sqlite3
import uuid as uuidlib
from datetime import datetime, timezone
from typing import Any, Dict, List

from loguru import logger

from domain.dates import day_index_for, week_start_iso
from domain.models import (
    CompletedSession,
    PlannedSession,
    Settings,
    Template,
    normalize_tags,
    session_from_record,
    settings_from_dict,
)
from infrastructure.repository import Repository


# ---------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------

def utc_now_sql() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


# ---------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------

_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS templates (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        type TEXT NOT NULL,
        title TEXT NOT NULL,
        duration_min INTEGER NOT NULL,
        rpe_default INTEGER NOT NULL,
        focus_tags TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS planned_sessions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        week_start TEXT NOT NULL,
        day_index INTEGER NOT NULL,
        start_time TEXT NOT NULL,
        type TEXT NOT NULL,
        title TEXT NOT NULL,
        duration_min INTEGER NOT NULL,
        rpe_planned INTEGER NOT NULL,
        status TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS completed_sessions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        planned_session_id TEXT,
        week_start TEXT NOT NULL,
        day_index INTEGER NOT NULL,
        type TEXT NOT NULL,
        title TEXT NOT NULL,
        date_iso TEXT NOT NULL,
        start_time TEXT NOT NULL,
        duration_min INTEGER NOT NULL,
        rpe INTEGER NOT NULL,
        notes TEXT,
        UNIQUE (user_id, week_start, day_index, start_time)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_settings (
        user_id TEXT PRIMARY KEY,
        settings TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_planned_week ON planned_sessions(user_id, week_start)",
    "CREATE INDEX IF NOT EXISTS ix_completed_date ON completed_sessions(user_id, date_iso)",
]


def _template_from_row(row: sqlite3.Row) -> Template:
    return Template(
        id=row["id"],
        type=row["type"],
        title=row["title"],
        duration_min=row["duration_min"],
        rpe_default=row["rpe_default"],
        focus_tags=json.loads(row["focus_tags"] or "[]"),
    )


class SqliteRepository(Repository):
    """Local single-file storage. One connection per call."""

    def __init__(self, db_path: str, user_id: str):
        super().__init__(user_id)
        self.db_path = db_path
        self.create_tables()

    # -----------------------------------------------------------------
    # Connection
    # -----------------------------------------------------------------

    def get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, check_same_thread=False)

    def create_tables(self) -> None:
        conn = self.get_connection()
        try:
            for stmt in _SCHEMA:
                conn.execute(stmt)
            conn.commit()
        finally:
            conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> int:
        conn = self.get_connection()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.rowcount
        finally:
            conn.close()

    def _query(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        conn = self.get_connection()
        conn.row_factory = sqlite3.Row
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    # -----------------------------------------------------------------
    # Templates
    # -----------------------------------------------------------------

    def list_templates(self) -> List[Template]:
        rows = self._query(
            "SELECT * FROM templates WHERE user_id = ? ORDER BY created_at, rowid",
            (self.require_user_id(),),
        )
        return [_template_from_row(r) for r in rows]

    def create_template(self, template: Template) -> Template:
        user_id = self.require_user_id()
        created = Template(
            id=template.id or str(uuidlib.uuid4()),
            type=template.type,
            title=template.title.strip(),
            duration_min=template.duration_min,
            rpe_default=template.rpe_default,
            focus_tags=normalize_tags(template.focus_tags),
        )

        self._execute(
            """
            INSERT INTO templates (
                id, user_id, type, title, duration_min, rpe_default,
                focus_tags, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                created.id,
                user_id,
                created.type,
                created.title,
                created.duration_min,
                created.rpe_default,
                json.dumps(created.focus_tags),
                utc_now_sql(),
            ),
        )
        return created

    def delete_template(self, template_id: str) -> None:
        self._execute(
            "DELETE FROM templates WHERE id = ? AND user_id = ?",
            (template_id, self.require_user_id()),
        )

    # -----------------------------------------------------------------
    # Planned week
    # -----------------------------------------------------------------

    def list_planned_week(self, week_start_iso: str) -> List[PlannedSession]:
        rows = self._query(
            """
            SELECT * FROM planned_sessions
            WHERE user_id = ? AND week_start = ?
            ORDER BY day_index, start_time
            """,
            (self.require_user_id(), week_start_iso),
        )
        return [session_from_record({**dict(r), "kind": "planned"}) for r in rows]

    def upsert_planned(self, week_start_iso: str, session: PlannedSession) -> None:
        self._execute(
            """
            INSERT INTO planned_sessions (
                id, user_id, week_start, day_index, start_time,
                type, title, duration_min, rpe_planned, status
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                week_start=excluded.week_start,
                day_index=excluded.day_index,
                start_time=excluded.start_time,
                type=excluded.type,
                title=excluded.title,
                duration_min=excluded.duration_min,
                rpe_planned=excluded.rpe_planned,
                status=excluded.status
            WHERE planned_sessions.user_id = excluded.user_id
            """,
            (
                session.id,
                self.require_user_id(),
                week_start_iso,
                session.day_index,
                session.start_time,
                session.type,
                session.title,
                session.duration_min,
                session.rpe_planned,
                session.status,
            ),
        )

    def delete_planned(self, session: PlannedSession) -> None:
        self._execute(
            "DELETE FROM planned_sessions WHERE id = ? AND user_id = ?",
            (session.id, self.require_user_id()),
        )

    def mark_planned_done(self, session: PlannedSession) -> None:
        self._execute(
            "UPDATE planned_sessions SET status = 'DONE' WHERE id = ? AND user_id = ?",
            (session.id, self.require_user_id()),
        )

    # -----------------------------------------------------------------
    # Completed log
    # -----------------------------------------------------------------

    def insert_completed(self, entry: CompletedSession) -> None:
        """Insert, replacing any entry in the same (week, day, start time) slot."""
        self._execute(
            """
            INSERT INTO completed_sessions (
                id, user_id, planned_session_id, week_start, day_index,
                type, title, date_iso, start_time, duration_min, rpe, notes
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, week_start, day_index, start_time) DO UPDATE SET
                planned_session_id=excluded.planned_session_id,
                type=excluded.type,
                title=excluded.title,
                date_iso=excluded.date_iso,
                duration_min=excluded.duration_min,
                rpe=excluded.rpe,
                notes=excluded.notes
            """,
            (
                entry.id,
                self.require_user_id(),
                entry.planned_session_id,
                week_start_iso(entry.date_iso),
                day_index_for(entry.date_iso),
                entry.type,
                entry.title,
                entry.date_iso,
                entry.start_time,
                entry.duration_min,
                entry.rpe,
                entry.notes,
            ),
        )

    def delete_completed_by_planned_id(self, planned_session_id: str) -> None:
        n = self._execute(
            "DELETE FROM completed_sessions WHERE planned_session_id = ? AND user_id = ?",
            (planned_session_id, self.require_user_id()),
        )
        logger.debug(f"Removed {n} completed session(s) for planned {planned_session_id}")

    def list_completed_range(self, start_iso: str, end_iso: str) -> List[CompletedSession]:
        rows = self._query(
            """
            SELECT * FROM completed_sessions
            WHERE user_id = ? AND date_iso >= ? AND date_iso <= ?
            ORDER BY date_iso DESC, start_time DESC
            """,
            (self.require_user_id(), start_iso, end_iso),
        )
        return [session_from_record({**dict(r), "kind": "completed"}) for r in rows]

    # -----------------------------------------------------------------
    # Settings
    # -----------------------------------------------------------------

    def load_settings(self) -> Settings:
        rows = self._query(
            "SELECT settings FROM user_settings WHERE user_id = ?",
            (self.require_user_id(),),
        )
        if not rows:
            return Settings()

        try:
            raw: Dict[str, Any] = json.loads(rows[0]["settings"])
        except json.JSONDecodeError:
            logger.warning("Stored settings are not valid JSON, using defaults")
            return Settings()
        return settings_from_dict(raw)

    def save_settings(self, settings: Settings) -> None:
        self._execute(
            """
            INSERT INTO user_settings(user_id, settings, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                settings=excluded.settings,
                updated_at=excluded.updated_at
            """,
            (self.require_user_id(), json.dumps(settings.to_dict()), utc_now_sql()),
        )

    def reset_all(self) -> None:
        user_id = self.require_user_id()
        conn = self.get_connection()
        try:
            # completed -> planned -> templates -> settings
            for table in ("completed_sessions", "planned_sessions", "templates", "user_settings"):
                conn.execute(f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
            conn.commit()
        finally:
            conn.close()
        logger.info(f"Reset all data for user {user_id}")
