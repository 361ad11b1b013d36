"""Integration tests for health reporting and generic error rendering."""

from __future__ import annotations

from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from commerce_api.core.extensions import db


def test_health_reports_ok(client) -> None:
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"
    assert resp.get_json()["db"] == "ok"


def test_health_degrades_when_database_fails(client, monkeypatch) -> None:
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
    monkeypatch.setattr(db, "session", broken)

    resp = client.get("/api/v1/health")

    assert resp.status_code == 503
    assert resp.get_json()["db"] == "fail"


def test_unknown_route_is_problem_json(client) -> None:
    resp = client.get("/api/v1/nope")

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["detail"] == "Route '/api/v1/nope' not found"


def test_wrong_method_is_problem_json(client) -> None:
    resp = client.delete("/api/v1/health")

    assert resp.status_code == 405
    assert resp.get_json()["code"] == "method_not_allowed"
