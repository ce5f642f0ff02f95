from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests
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
from infrastructure.repository import BackendError, NotAuthenticatedError, Repository


REQUEST_TIMEOUT = 30


def _template_from_json(r: Dict[str, Any]) -> Template:
    return Template(
        id=str(r["id"]),
        type=r["type"],
        title=r["title"],
        duration_min=r["duration_min"],
        rpe_default=r["rpe_default"],
        focus_tags=r.get("focus_tags") or [],
    )


def _completed_from_json(r: Dict[str, Any]) -> CompletedSession:
    payload = r.get("payload") or {}
    return session_from_record(
        {
            **r,
            "kind": "completed",
            "date_iso": str(r["date_iso"]),
            "notes": payload.get("notes"),
        }
    )


class RestRepository(Repository):
    """
    Tables on the hosted backend, reached through its PostgREST-style
    REST endpoint. Row-level security on the backend enforces ownership;
    every query is still filtered on user_id.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str],
        user_id: str,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(user_id)
        self.base_url = base_url.rstrip("/")

        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "TrainingPlanner/1.0",
        })

    # -----------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        headers = {"Prefer": prefer} if prefer else None

        try:
            r = self.session.request(
                method,
                f"{self.base_url}/rest/v1/{table}",
                params=params,
                json=json,
                headers=headers,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise BackendError(f"{method} {table} failed: {e}") from e

        if r.status_code == 401:
            raise NotAuthenticatedError()

        try:
            r.raise_for_status()
        except requests.HTTPError as e:
            raise BackendError(f"{method} {table} failed: {r.text[:500]}") from e

        if r.status_code == 204 or not r.content:
            return []

        if not r.headers.get("content-type", "").startswith("application/json"):
            raise BackendError(f"{method} {table} returned non-JSON: {r.text[:500]}")

        data = r.json()
        if isinstance(data, dict):
            return [data]
        return data

    def _owned(self, **filters: str) -> Dict[str, str]:
        params = {"user_id": f"eq.{self.require_user_id()}"}
        for k, v in filters.items():
            params[k] = f"eq.{v}"
        return params

    # -----------------------------------------------------------------
    # Templates
    # -----------------------------------------------------------------

    def list_templates(self) -> List[Template]:
        rows = self._request(
            "GET",
            "templates",
            params={**self._owned(), "select": "*", "order": "created_at.asc"},
        )
        return [_template_from_json(r) for r in rows]

    def create_template(self, template: Template) -> Template:
        body = {
            "user_id": self.require_user_id(),
            "type": template.type,
            "title": template.title.strip(),
            "duration_min": template.duration_min,
            "rpe_default": template.rpe_default,
            "focus_tags": normalize_tags(template.focus_tags),
        }
        if template.id:
            body["id"] = template.id

        rows = self._request("POST", "templates", json=body, prefer="return=representation")
        if not rows:
            raise BackendError("Template insert returned no row")
        return _template_from_json(rows[0])

    def delete_template(self, template_id: str) -> None:
        self._request("DELETE", "templates", params=self._owned(id=template_id))

    # -----------------------------------------------------------------
    # Planned week
    # -----------------------------------------------------------------

    def list_planned_week(self, week_start_iso: str) -> List[PlannedSession]:
        rows = self._request(
            "GET",
            "planned_sessions",
            params={
                **self._owned(week_start=week_start_iso),
                "select": "*",
                "order": "day_index.asc,start_time.asc",
            },
        )
        return [session_from_record({**r, "kind": "planned"}) for r in rows]

    def upsert_planned(self, week_start_iso: str, session: PlannedSession) -> None:
        self._request(
            "POST",
            "planned_sessions",
            params={"on_conflict": "id"},
            json={
                "id": session.id,
                "user_id": self.require_user_id(),
                "week_start": week_start_iso,
                "day_index": session.day_index,
                "start_time": session.start_time,
                "type": session.type,
                "title": session.title,
                "duration_min": session.duration_min,
                "rpe_planned": session.rpe_planned,
                "status": session.status,
            },
            prefer="resolution=merge-duplicates",
        )

    def delete_planned(self, session: PlannedSession) -> None:
        self._request("DELETE", "planned_sessions", params=self._owned(id=session.id))

    def mark_planned_done(self, session: PlannedSession) -> None:
        self._request(
            "PATCH",
            "planned_sessions",
            params=self._owned(id=session.id),
            json={"status": "DONE"},
        )

    # -----------------------------------------------------------------
    # Completed log
    # -----------------------------------------------------------------

    def insert_completed(self, entry: CompletedSession) -> None:
        self._request(
            "POST",
            "completed_sessions",
            params={"on_conflict": "user_id,week_start,day_index,start_time"},
            json={
                "user_id": self.require_user_id(),
                "planned_session_id": entry.planned_session_id,
                "week_start": week_start_iso(entry.date_iso),
                "day_index": day_index_for(entry.date_iso),
                "type": entry.type,
                "title": entry.title,
                "date_iso": entry.date_iso,
                "start_time": entry.start_time,
                "duration_min": entry.duration_min,
                "rpe": entry.rpe,
                "payload": {"notes": entry.notes},
            },
            prefer="resolution=merge-duplicates",
        )

    def delete_completed_by_planned_id(self, planned_session_id: str) -> None:
        self._request(
            "DELETE",
            "completed_sessions",
            params=self._owned(planned_session_id=planned_session_id),
        )

    def list_completed_range(self, start_iso: str, end_iso: str) -> List[CompletedSession]:
        params = self._owned()
        params["and"] = f"(date_iso.gte.{start_iso},date_iso.lte.{end_iso})"
        params["select"] = "*"
        params["order"] = "date_iso.desc,start_time.desc"

        rows = self._request("GET", "completed_sessions", params=params)
        return [_completed_from_json(r) for r in rows]

    # -----------------------------------------------------------------
    # Settings
    # -----------------------------------------------------------------

    def load_settings(self) -> Settings:
        try:
            rows = self._request(
                "GET",
                "user_settings",
                params={**self._owned(), "select": "settings"},
            )
        except BackendError:
            logger.exception("Could not load settings, using defaults")
            return Settings()

        if not rows or not rows[0].get("settings"):
            return Settings()
        return settings_from_dict(rows[0]["settings"])

    def save_settings(self, settings: Settings) -> None:
        self._request(
            "POST",
            "user_settings",
            params={"on_conflict": "user_id"},
            json={
                "user_id": self.require_user_id(),
                "settings": settings.to_dict(),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            prefer="resolution=merge-duplicates",
        )

    def reset_all(self) -> None:
        # completed -> planned -> templates -> settings
        for table in ("completed_sessions", "planned_sessions", "templates", "user_settings"):
            self._request("DELETE", table, params=self._owned())
        logger.info(f"Reset all backend data for user {self.require_user_id()}")
