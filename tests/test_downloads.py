# tests/test_downloads.py

"""
Tests for the downloadable-items catalog, purchases and gated downloads.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from conftest import auth_headers


def put_download(fake_s3, filename, body=b"PK\x03\x04zip"):
    fake_s3.objects[f"downloads/{filename}"] = (body, "application/zip")


# -----------------------------------------------------
# Catalog
# -----------------------------------------------------
def test_catalog_lists_active_items_with_flags(client: TestClient):
    response = client.get("/downloads", headers=auth_headers(11))
    assert response.status_code == 200
    items = {i["id"]: i for i in response.json()["items"]}
    assert set(items) == {100, 101}
    assert items[100]["is_free"] is True and items[100]["can_download"] is True
    assert items[101]["is_free"] is False and items[101]["can_download"] is False


def test_catalog_filters(client: TestClient, fake_db):
    fake_db.add("download_purchases", {"user_id": 5, "item_id": 101, "status": "paid"})

    def listed(query, user_id=5):
        return {i["id"] for i in client.get(f"/downloads{query}", headers=auth_headers(user_id)).json()["items"]}

    assert listed("?price=free") == {100}
    assert listed("?price=paid") == {101}
    assert listed("?program=archicad") == {100}
    assert listed("?program=revit") == {101}
    assert listed("?my=true") == {100, 101}
    assert listed("?my=true", user_id=6) == {100}


def test_get_single_item_annotated(client: TestClient, fake_db):
    fake_db.add("download_purchases", {"user_id": 6, "item_id": 101, "status": "paid"})
    item = client.get("/downloads/101", headers=auth_headers(6)).json()["item"]
    assert item["is_purchased"] is True
    assert client.get("/downloads/999", headers=auth_headers(6)).status_code == 404


# -----------------------------------------------------
# Download gate
# -----------------------------------------------------
def test_free_item_download_counts(client: TestClient, fake_db, fake_s3):
    put_download(fake_s3, "doors.zip")
    response = client.get("/downloads/100/download", headers=auth_headers(5))
    assert response.status_code == 200
    assert response.content == b"PK\x03\x04zip"
    assert response.headers["content-disposition"] == 'attachment; filename="doors.zip"'
    assert fake_db.get("downloadable_items", 100)["download_count"] == 1


def test_paid_item_requires_paid_purchase(client: TestClient, fake_db, fake_s3):
    put_download(fake_s3, "windows.zip")

    response = client.get("/downloads/101/download", headers=auth_headers(5))
    assert response.status_code == 403
    assert response.json()["reason"] == "not_purchased"
    assert fake_db.get("downloadable_items", 101)["download_count"] == 0

    fake_db.add("download_purchases", {"user_id": 5, "item_id": 101, "status": "paid"})
    assert client.get("/downloads/101/download", headers=auth_headers(5)).status_code == 200
    assert fake_db.get("downloadable_items", 101)["download_count"] == 1


def test_counter_failure_does_not_fail_download(client: TestClient, fake_db, fake_s3):
    put_download(fake_s3, "doors.zip")
    fake_db.failing_tables.add("increment_download_count")
    assert client.get("/downloads/100/download", headers=auth_headers(5)).status_code == 200


# -----------------------------------------------------
# Purchase
# -----------------------------------------------------
def test_free_purchase_granted_immediately(client: TestClient, fake_db):
    response = client.post("/downloads/100/purchase", headers=auth_headers(5))
    assert response.status_code == 200
    assert response.json()["purchase"]["status"] == "paid"


def test_paid_purchase_without_commerce_is_503(client: TestClient):
    with patch("routers.downloads.is_commerce_configured", return_value=False):
        response = client.post("/downloads/101/purchase", headers=auth_headers(5))
    assert response.status_code == 503


def test_paid_purchase_creates_pending_payment(client: TestClient, fake_db):
    with patch("routers.downloads.is_commerce_configured", return_value=True):
        response = client.post("/downloads/101/purchase", headers=auth_headers(5))
        assert response.status_code == 200
        data = response.json()
        assert data["requires_payment"] is True
        assert data["external_product_id"] == "prod-101"
        assert data["purchase"]["status"] == "pending"
        assert data["purchase"]["currency"] == "RUB"
        assert len(fake_db.rows("payments")) == 1

        # Still not downloadable while pending
        assert client.get("/downloads/101/download", headers=auth_headers(5)).status_code == 403

        fake_db.rows("download_purchases")[0]["status"] = "paid"
        response = client.post("/downloads/101/purchase", headers=auth_headers(5))
        assert response.status_code == 400


# -----------------------------------------------------
# Catalog management
# -----------------------------------------------------
def test_designer_uploads_and_deletes_item(client: TestClient, fake_db, fake_s3):
    response = client.post(
        "/downloads",
        files={"file": ("kit.zip", b"zipbytes", "application/zip")},
        data={"name": "Revit kit", "price": "990", "category": "families"},
        headers=auth_headers(10),
    )
    assert response.status_code == 201
    item = response.json()["item"]
    assert item["is_free"] is False
    assert f"downloads/{item['filename']}" in fake_s3.objects

    response = client.delete(f"/downloads/{item['id']}", headers=auth_headers(10))
    assert response.status_code == 200
    assert fake_db.get("downloadable_items", item["id"]) is None
    assert f"downloads/{item['filename']}" not in fake_s3.objects


@pytest.mark.parametrize("price", ["cheap", "NaN", "Infinity", "-1"])
def test_upload_rejects_bad_price(client: TestClient, fake_db, price):
    response = client.post(
        "/downloads",
        files={"file": ("kit.zip", b"zipbytes", "application/zip")},
        data={"name": "Kit", "price": price},
        headers=auth_headers(1),
    )
    assert response.status_code == 400
    assert len(fake_db.rows("downloadable_items")) == 3


def test_builder_and_customer_cannot_manage_catalog(client: TestClient):
    for user_id in (5, 11):
        response = client.delete("/downloads/100", headers=auth_headers(user_id))
        assert response.status_code == 403
        assert response.json()["reason"] == "role_not_permitted"


def test_stored_nan_price_is_treated_as_paid(client: TestClient, fake_db, fake_s3):
    put_download(fake_s3, "windows.zip")
    fake_db.get("downloadable_items", 101)["price"] = "NaN"

    response = client.get("/downloads/101/download", headers=auth_headers(5))
    assert response.status_code == 403
    assert response.json()["reason"] == "not_purchased"
