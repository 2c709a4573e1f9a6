# tests/test_portfolio.py

"""
Tests for portfolios and the health endpoints.
"""

from fastapi.testclient import TestClient

from conftest import auth_headers


def test_public_portfolio_shows_published_projects_only(client: TestClient):
    response = client.get("/portfolio/10", headers=auth_headers(6))
    assert response.status_code == 200
    assert [p["id"] for p in response.json()["projects"]] == [1]


def test_owner_sees_drafts(client: TestClient):
    response = client.get("/portfolio/10", headers=auth_headers(10))
    assert [p["id"] for p in response.json()["projects"]] == [1, 2]


def test_private_portfolio(client: TestClient):
    response = client.get("/portfolio/11", headers=auth_headers(6))
    assert response.status_code == 403
    assert response.json()["reason"] == "not_owner"
    assert client.get("/portfolio/11", headers=auth_headers(1)).status_code == 200


def test_missing_portfolio_is_null(client: TestClient):
    response = client.get("/portfolio/5", headers=auth_headers(6))
    assert response.status_code == 200
    assert response.json()["portfolio"] is None


def test_upsert_own_portfolio(client: TestClient, fake_db):
    response = client.put("/portfolio", json={"title": "My homes"}, headers=auth_headers(5))
    assert response.status_code == 200
    created = response.json()["portfolio"]
    assert created["user_id"] == 5
    assert created["is_public"] is False

    response = client.put("/portfolio", json={"is_public": True}, headers=auth_headers(5))
    assert response.json()["portfolio"]["title"] == "My homes"
    assert response.json()["portfolio"]["is_public"] is True
    assert len([p for p in fake_db.rows("portfolios") if p["user_id"] == 5]) == 1


def test_project_mutations_owner_only(client: TestClient, fake_db):
    response = client.put("/portfolio/projects/3", json={"title": "Hacked"}, headers=auth_headers(10))
    assert response.status_code == 403

    response = client.put("/portfolio/projects/3", json={"is_published": False}, headers=auth_headers(11))
    assert response.status_code == 200
    assert fake_db.get("portfolio_projects", 3)["is_published"] is False

    assert client.delete("/portfolio/projects/2", headers=auth_headers(1)).status_code == 200
    assert client.delete("/portfolio/projects/999", headers=auth_headers(1)).status_code == 404


# -----------------------------------------------------
# Projects
# -----------------------------------------------------
def test_list_my_projects_includes_drafts(client: TestClient):
    response = client.get("/portfolio/projects", headers=auth_headers(10))
    assert response.status_code == 200
    assert [p["id"] for p in response.json()["projects"]] == [1, 2]

    assert client.get("/portfolio/projects", headers=auth_headers(5)).json()["projects"] == []


def test_designer_adds_project_at_end(client: TestClient, fake_db):
    response = client.post(
        "/portfolio/projects",
        json={"title": " Riverside villa ", "tags": ["villa", "wood"]},
        headers=auth_headers(10),
    )
    assert response.status_code == 201
    project = response.json()["project"]
    assert project["title"] == "Riverside villa"
    assert project["portfolio_id"] == 1
    assert project["order_index"] == 2
    assert project["is_published"] is True
    assert project["tags"] == ["villa", "wood"]


def test_first_project_creates_portfolio(client: TestClient, fake_db):
    response = client.post("/portfolio/projects", json={"title": "Bridge"}, headers=auth_headers(9))
    assert response.status_code == 201

    portfolio = next(p for p in fake_db.rows("portfolios") if p["user_id"] == 9)
    assert portfolio["title"] == "User 9"
    assert portfolio["is_public"] is False
    assert response.json()["project"]["order_index"] == 0


def test_customer_cannot_add_projects(client: TestClient, fake_db):
    response = client.post("/portfolio/projects", json={"title": "My house"}, headers=auth_headers(5))
    assert response.status_code == 403
    assert response.json()["reason"] == "role_not_permitted"
    assert not [p for p in fake_db.rows("portfolios") if p["user_id"] == 5]


def test_project_title_required(client: TestClient):
    response = client.post("/portfolio/projects", json={"title": "  "}, headers=auth_headers(10))
    assert response.status_code == 422


# -----------------------------------------------------
# Images
# -----------------------------------------------------
def upload_image(client, user_id, kind="avatar", content_type="image/png", name="me.png"):
    return client.post(
        "/portfolio/upload",
        files={"file": (name, b"\x89PNG", content_type)},
        data={"type": kind},
        headers=auth_headers(user_id),
    )


def test_designer_uploads_avatar(client: TestClient, fake_s3):
    response = upload_image(client, 10)
    assert response.status_code == 201
    data = response.json()
    assert data["filename"].startswith("10-") and data["filename"].endswith(".png")
    assert f"portfolio/avatars/{data['filename']}" in fake_s3.objects

    # Public portfolio: anyone signed in can load it
    response = client.get(data["url"], headers=auth_headers(6))
    assert response.status_code == 200
    assert response.content == b"\x89PNG"


def test_private_portfolio_image_owner_only(client: TestClient):
    url = upload_image(client, 11, kind="cover").json()["url"]
    assert client.get(url, headers=auth_headers(11)).status_code == 200

    response = client.get(url, headers=auth_headers(6))
    assert response.status_code == 403
    assert response.json()["reason"] == "not_owner"


def test_image_upload_validation(client: TestClient):
    assert upload_image(client, 10, kind="banner").status_code == 400
    assert upload_image(client, 10, content_type="application/pdf", name="cv.pdf").status_code == 400

    response = upload_image(client, 5)
    assert response.status_code == 403
    assert response.json()["reason"] == "role_not_permitted"


def test_unknown_image_name_is_404(client: TestClient):
    assert client.get("/portfolio/images/avatars/..secret", headers=auth_headers(1)).status_code == 404
    assert client.get("/portfolio/images/other/10-1.png", headers=auth_headers(1)).status_code == 404


def test_health_endpoints(client: TestClient):
    assert client.get("/health/app").json()["status"] == "ok"
    data = client.get("/health/db").json()
    assert data["status"] == "ok"
