"""Tests for the hosted-backend repository, using a fake HTTP session."""

import json

import pytest
import requests

from domain.models import Settings, Template
from infrastructure.remote import RestRepository
from infrastructure.repository import BackendError, NotAuthenticatedError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content_type="application/json"):
        self.status_code = status_code
        self._payload = payload
        self.headers = {"content-type": content_type}
        if payload is None:
            self.text = ""
        elif content_type.startswith("application/json"):
            self.text = json.dumps(payload)
        else:
            self.text = str(payload)
        self.content = self.text.encode()

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, *responses):
        self.headers = {}
        self.calls = []
        self._responses = list(responses)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "headers": headers})
        if not self._responses:
            return FakeResponse(204)
        return self._responses.pop(0)


def _repo(*responses, user_id="user-a"):
    session = FakeSession(*responses)
    repo = RestRepository(
        base_url="https://backend.example.com/",
        api_key="anon-key",
        access_token="jwt",
        user_id=user_id,
        session=session,
    )
    return repo, session


def test_session_headers():
    _, session = _repo()
    assert session.headers["apikey"] == "anon-key"
    assert session.headers["Authorization"] == "Bearer jwt"


def test_list_completed_range_filters_and_maps_payload():
    row = {
        "id": "c1", "planned_session_id": "p1", "type": "GYM", "title": "Legs",
        "date_iso": "2026-01-26", "start_time": "18:00", "duration_min": 60, "rpe": 7,
        "payload": {"notes": "heavy"},
    }
    repo, session = _repo(FakeResponse(200, [row]))

    [s] = repo.list_completed_range("2026-01-20", "2026-01-26")

    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://backend.example.com/rest/v1/completed_sessions"
    assert call["params"]["user_id"] == "eq.user-a"
    assert call["params"]["and"] == "(date_iso.gte.2026-01-20,date_iso.lte.2026-01-26)"
    assert call["params"]["order"] == "date_iso.desc,start_time.desc"
    assert s.kind == "completed"
    assert s.notes == "heavy"
    assert s.load == 420


def test_create_template_returns_stored_row():
    stored = {"id": "t9", "type": "GYM", "title": "Core", "duration_min": 30,
              "rpe_default": 5, "focus_tags": ["core"]}
    repo, session = _repo(FakeResponse(201, [stored]))

    t = repo.create_template(Template(id="", type="GYM", title="Core ", duration_min=30,
                                      rpe_default=5, focus_tags=["Core", "core"]))

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["json"]["focus_tags"] == ["core"]
    assert call["json"]["title"] == "Core"
    assert "id" not in call["json"]
    assert call["headers"] == {"Prefer": "return=representation"}
    assert t.id == "t9"


def test_insert_completed_derives_week_slot(make_completed):
    repo, session = _repo()

    repo.insert_completed(make_completed(date_iso="2026-02-01", notes="ok"))

    call = session.calls[0]
    assert call["params"] == {"on_conflict": "user_id,week_start,day_index,start_time"}
    assert call["json"]["week_start"] == "2026-01-26"
    assert call["json"]["day_index"] == 6
    assert call["json"]["payload"] == {"notes": "ok"}


def test_mark_planned_done_patches_status(make_planned):
    repo, session = _repo()
    planned = make_planned()

    repo.mark_planned_done(planned)

    call = session.calls[0]
    assert call["method"] == "PATCH"
    assert call["params"] == {"user_id": "eq.user-a", "id": f"eq.{planned.id}"}
    assert call["json"] == {"status": "DONE"}


def test_delete_cascade_removes_completed_first(make_planned):
    repo, session = _repo()
    planned = make_planned()

    repo.delete_planned_cascade(planned)

    assert [c["url"].rsplit("/", 1)[1] for c in session.calls] == ["completed_sessions", "planned_sessions"]
    assert session.calls[0]["params"]["planned_session_id"] == f"eq.{planned.id}"


def test_unauthorized_raises_not_authenticated():
    repo, _ = _repo(FakeResponse(401, {"message": "JWT expired"}))
    with pytest.raises(NotAuthenticatedError):
        repo.list_templates()


def test_http_error_raises_backend_error():
    repo, _ = _repo(FakeResponse(500, {"message": "boom"}))
    with pytest.raises(BackendError, match="boom"):
        repo.list_templates()


def test_non_json_response_raises_backend_error():
    repo, _ = _repo(FakeResponse(200, "<html>gateway</html>", content_type="text/html"))
    with pytest.raises(BackendError, match="non-JSON"):
        repo.list_templates()


def test_empty_user_never_hits_backend():
    repo, session = _repo(user_id="")
    with pytest.raises(NotAuthenticatedError):
        repo.list_planned_week("2026-01-26")
    assert session.calls == []


def test_load_settings_defaults_on_missing_or_failure():
    repo, _ = _repo(FakeResponse(200, []))
    assert repo.load_settings() == Settings()

    repo, _ = _repo(FakeResponse(503, {"message": "down"}))
    assert repo.load_settings() == Settings()

    repo, _ = _repo(FakeResponse(200, [{"settings": {"default_rpe": 8}}]))
    assert repo.load_settings().default_rpe == 8


def test_reset_all_deletes_every_table_in_order():
    repo, session = _repo()

    repo.reset_all()

    assert [c["url"].rsplit("/", 1)[1] for c in session.calls] == [
        "completed_sessions", "planned_sessions", "templates", "user_settings",
    ]
    assert all(c["method"] == "DELETE" for c in session.calls)
