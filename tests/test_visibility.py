# tests/test_visibility.py

"""
Tests for the visibility toggle manager (unit + API).
"""

import pytest

from conftest import auth_headers, principal
from core.errors import AccessDenied
from core.ownership import load_comment, load_media
from core.visibility import set_visibility, visibility_action
from models.enums import Action, DenyReason, ResourceKind, Role


def test_media_and_comments_use_different_actions(fake_db):
    assert visibility_action(load_media(ResourceKind.photo, 77)) == Action.toggle_resource_visibility
    assert visibility_action(load_comment(ResourceKind.photo_comment, 3, 78)) == Action.edit_comment_visibility


def test_set_visibility_is_idempotent(fake_db):
    designer = principal(10, Role.designer)

    first = set_visibility(designer, load_media(ResourceKind.photo, 77), True)
    second = set_visibility(designer, load_media(ResourceKind.photo, 77), True)

    assert first["is_visible_to_customer"] is True
    assert second == first
    assert fake_db.get("photos", 77)["is_visible_to_customer"] is True


@pytest.mark.parametrize("user_id,role,reason", [
    (5, Role.customer, DenyReason.role_not_permitted),
    (11, Role.builder, DenyReason.role_not_permitted),
    (9, Role.designer, DenyReason.not_assigned),
])
def test_set_visibility_denied(fake_db, user_id, role, reason):
    with pytest.raises(AccessDenied) as exc:
        set_visibility(principal(user_id, role), load_media(ResourceKind.photo, 77), True)
    assert exc.value.reason == reason
    assert fake_db.get("photos", 77)["is_visible_to_customer"] is False


def test_comment_visibility_author_path(fake_db):
    # Customer 5 authored comment 3
    updated = set_visibility(principal(5, Role.customer), load_comment(ResourceKind.photo_comment, 3, 78), False)
    assert updated["is_visible_to_customer"] is False

    with pytest.raises(AccessDenied) as exc:
        set_visibility(principal(10, Role.designer), load_comment(ResourceKind.photo_comment, 3, 78), True)
    assert exc.value.reason == DenyReason.not_author


def test_visibility_change_seen_by_next_read(client):
    response = client.get("/files/photos/10/hidden.jpg", headers=auth_headers(5))
    assert response.status_code == 403
    assert response.json()["reason"] == "not_visible_to_customer"

    response = client.put(
        "/photos/77/visibility",
        json={"is_visible_to_customer": True},
        headers=auth_headers(10),
    )
    assert response.status_code == 200
    assert response.json()["photo"]["is_visible_to_customer"] is True

    listed = client.get("/objects/10/photos", headers=auth_headers(5)).json()["photos"]
    assert {p["id"] for p in listed} == {77, 78}


def test_visibility_endpoint_requires_body(client):
    response = client.put("/photos/77/visibility", json={}, headers=auth_headers(10))
    assert response.status_code == 422
