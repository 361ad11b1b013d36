"""Integration tests for registration and profile lookup."""

from __future__ import annotations

from tests.factories import RoleFactory, UserFactory

USERS = "/api/v1/users"


def test_duplicate_username_is_conflict(client, session) -> None:
    RoleFactory()
    UserFactory(username="taken")

    resp = client.post(USERS, json={"username": "taken", "password": "secret123"})

    assert resp.status_code == 409


def test_short_password_is_field_error(client, session) -> None:
    RoleFactory()

    resp = client.post(USERS, json={"username": "shorty", "password": "123"})

    assert resp.status_code == 400
    assert list(resp.get_json()["details"]["errors"]) == ["password"]


def test_profile_requires_authentication(client, user) -> None:
    resp = client.get(f"{USERS}/{user.id}")

    assert resp.status_code == 401


def test_profile_never_exposes_credentials(client, user, auth_header) -> None:
    body = client.get(f"{USERS}/{user.id}", headers=auth_header).get_json()["data"]

    assert set(body) == {"id", "username", "role"}
