# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

FakeSupabase is an in-memory stand-in for the subset of the supabase-py
query builder used by core.store; FakeS3 does the same for boto3.
Nothing here touches the network.
"""

import copy
import io
from types import SimpleNamespace
from typing import Generator

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from supabase import AuthApiError
from unittest.mock import patch

from main import create_app
from models.access import Principal


# ============================================================
# In-memory Supabase
# ============================================================
class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.order_by = None
        self.order_desc = False
        self.row_limit = None

    # --- builders -------------------------------------------
    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, changes):
        self.op = "update"
        self.payload = changes
        return self

    def delete(self):
        self.op = "delete"
        return self

    def upsert(self, payload, on_conflict=None):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def or_(self, expression):
        # "col.ilike.%term%,col.ilike.%term%"
        clauses = []
        for part in expression.split(","):
            column, _, pattern = part.split(".", 2)
            clauses.append((column, pattern.strip("%").lower()))
        self.filters.append(
            lambda row: any(term in (row.get(column) or "").lower() for column, term in clauses)
        )
        return self

    def order(self, column, desc=False):
        self.order_by = column
        self.order_desc = desc
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    # --- execution ------------------------------------------
    def _matching(self):
        return [row for row in self.db.rows(self.table_name) if all(f(row) for f in self.filters)]

    def execute(self):
        if self.table_name in self.db.failing_tables:
            raise Exception(f"connection to {self.table_name} refused")

        if self.op == "select":
            rows = self._matching()
            if self.order_by:
                rows = sorted(
                    rows,
                    key=lambda r: (r.get(self.order_by) is None, r.get(self.order_by)),
                    reverse=self.order_desc,
                )
            if self.row_limit is not None:
                rows = rows[: self.row_limit]
            return SimpleNamespace(data=copy.deepcopy(rows))

        if self.op == "insert":
            return SimpleNamespace(data=[self.db.add(self.table_name, self.payload)])

        if self.op == "update":
            updated = []
            for row in self._matching():
                row.update(self.payload)
                updated.append(copy.deepcopy(row))
            return SimpleNamespace(data=updated)

        if self.op == "delete":
            doomed = self._matching()
            table = self.db.rows(self.table_name)
            table[:] = [row for row in table if row not in doomed]
            return SimpleNamespace(data=copy.deepcopy(doomed))

        if self.op == "upsert":
            keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
            for row in self.db.rows(self.table_name):
                if all(row.get(k) == self.payload.get(k) for k in keys):
                    row.update(self.payload)
                    return SimpleNamespace(data=[copy.deepcopy(row)])
            return SimpleNamespace(data=[self.db.add(self.table_name, self.payload)])

        raise AssertionError(f"unsupported op {self.op}")


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        if self.name in self.db.failing_tables:
            raise Exception(f"function {self.name} failed")
        if self.name == "increment_download_count":
            for row in self.db.rows("downloadable_items"):
                if row["id"] == self.params["item_id"]:
                    row["download_count"] = (row.get("download_count") or 0) + 1
            return SimpleNamespace(data=None)
        raise AssertionError(f"unknown rpc {self.name}")


class RejectedToken(AuthApiError):
    """The 401 GoTrue answers with for a bad or expired JWT."""

    def __init__(self):
        Exception.__init__(self, "invalid JWT: unable to parse or verify signature")
        self.message = "invalid JWT: unable to parse or verify signature"
        self.status = 401


class FakeAuth:
    """GoTrue double: token → auth user. Unknown tokens raise like GoTrue does."""

    def __init__(self):
        self.tokens = {}
        self.outage = None

    def get_user(self, token):
        if self.outage:
            raise self.outage
        auth_user = self.tokens.get(token)
        if auth_user is None:
            raise RejectedToken()
        return SimpleNamespace(user=auth_user)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failing_tables = set()
        self.auth = FakeAuth()

    def rows(self, table: str) -> list:
        return self.tables.setdefault(table, [])

    def add(self, table: str, payload: dict) -> dict:
        rows = self.rows(table)
        row = dict(payload)
        if "id" not in row:
            row["id"] = max((r["id"] for r in rows), default=0) + 1
        rows.append(row)
        return copy.deepcopy(row)

    def get(self, table: str, row_id) -> dict:
        for row in self.rows(table):
            if row["id"] == row_id:
                return row
        return None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        return FakeRpc(self, name, params)

    def register_token(self, token: str, auth_user_id: str, email: str = "", metadata=None):
        self.auth.tokens[token] = SimpleNamespace(
            id=auth_user_id,
            email=email,
            user_metadata=metadata or {},
        )


# ============================================================
# In-memory S3
# ============================================================
class FakeS3:
    def __init__(self):
        self.objects = {}

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        body, content_type = self.objects[Key]
        return {"Body": io.BytesIO(body), "ContentType": content_type}

    def put_object(self, Bucket, Key, Body, ContentType=None):
        self.objects[Key] = (Body, ContentType)
        return {}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)
        return {}


# ============================================================
# Seed data
#
#   users:   1 ADMIN, 5 CUSTOMER (owns object 10), 6 CUSTOMER (owns 20),
#            9 DESIGNER (unassigned), 10 DESIGNER + 11 BUILDER (assigned
#            to object 10), 12 CUSTOMER (INACTIVE)
#   photos:  77 hidden + 78 visible under object 10, 90 under object 20
# ============================================================
USERS = [
    (1, "ADMIN", "ACTIVE"),
    (5, "CUSTOMER", "ACTIVE"),
    (6, "CUSTOMER", "ACTIVE"),
    (9, "DESIGNER", "ACTIVE"),
    (10, "DESIGNER", "ACTIVE"),
    (11, "BUILDER", "ACTIVE"),
    (12, "CUSTOMER", "INACTIVE"),
]


def seed(db: FakeSupabase) -> None:
    for user_id, role, status in USERS:
        db.add("users", {
            "id": user_id,
            "auth_user_id": f"auth-{user_id}",
            "email": f"user{user_id}@example.com",
            "name": f"User {user_id}",
            "role": role,
            "status": status,
        })
        db.register_token(f"token-{user_id}", f"auth-{user_id}", f"user{user_id}@example.com")

    db.add("objects", {"id": 10, "title": "House on the Lake", "owner_user_id": 5, "status": "ACTIVE",
                       "created_at": "2024-01-01T00:00:00+00:00"})
    db.add("objects", {"id": 20, "title": "City Loft", "owner_user_id": 6, "status": "ACTIVE",
                       "created_at": "2024-02-01T00:00:00+00:00"})

    db.add("object_assignments", {"id": 1, "user_id": 10, "object_id": 10})
    db.add("object_assignments", {"id": 2, "user_id": 11, "object_id": 10})

    db.add("folders", {"id": 1, "object_id": 10, "name": "Foundation", "order_index": 0})
    db.add("folders", {"id": 2, "object_id": 20, "name": "Interior", "order_index": 0})

    db.add("photos", {"id": 77, "object_id": 10, "filename": "hidden.jpg", "mime_type": "image/jpeg",
                      "is_visible_to_customer": False, "folder_id": None,
                      "uploaded_at": "2024-03-01T00:00:00+00:00"})
    db.add("photos", {"id": 78, "object_id": 10, "filename": "site.jpg", "mime_type": "image/jpeg",
                      "is_visible_to_customer": True, "folder_id": 1,
                      "uploaded_at": "2024-03-02T00:00:00+00:00"})
    db.add("photos", {"id": 90, "object_id": 20, "filename": "loft.jpg", "mime_type": "image/jpeg",
                      "is_visible_to_customer": True, "folder_id": None,
                      "uploaded_at": "2024-03-03T00:00:00+00:00"})

    db.add("videos", {"id": 50, "object_id": 10, "filename": "walkthrough.mp4", "mime_type": "video/mp4",
                      "is_visible_to_customer": True, "folder_id": None,
                      "uploaded_at": "2024-03-04T00:00:00+00:00"})

    db.add("bim_models", {"id": 40, "object_id": 10, "filename": "house.ifc", "original_name": "house.ifc",
                          "mime_type": "application/octet-stream", "is_visible_to_customer": True,
                          "uploaded_at": "2024-03-05T00:00:00+00:00"})

    db.add("photo_comments", {"id": 3, "photo_id": 78, "author_user_id": 5, "text": "Looks great",
                              "is_visible_to_customer": True, "created_at": "2024-03-06T00:00:00+00:00"})
    db.add("photo_comments", {"id": 4, "photo_id": 78, "author_user_id": 10, "text": "Internal note",
                              "is_visible_to_customer": False, "created_at": "2024-03-07T00:00:00+00:00"})
    db.add("model_comments", {"id": 7, "model_id": 40, "author_user_id": 10, "text": "Check the roof",
                              "is_visible_to_customer": True, "created_at": "2024-03-08T00:00:00+00:00"})

    db.add("downloadable_items", {"id": 100, "name": "ArchiCAD door family", "filename": "doors.zip",
                                  "mime_type": "application/zip", "price": None, "status": "ACTIVE",
                                  "download_count": 0, "created_at": "2024-01-01T00:00:00+00:00"})
    db.add("downloadable_items", {"id": 101, "name": "Revit window pack", "filename": "windows.zip",
                                  "mime_type": "application/zip", "price": "1500", "status": "ACTIVE",
                                  "external_product_id": "prod-101", "download_count": 0,
                                  "created_at": "2024-01-02T00:00:00+00:00"})
    db.add("downloadable_items", {"id": 102, "name": "Renga stairs", "filename": "stairs.zip",
                                  "price": "0", "status": "ARCHIVED", "download_count": 0,
                                  "created_at": "2024-01-03T00:00:00+00:00"})

    db.add("portfolios", {"id": 1, "user_id": 10, "title": "Designer portfolio", "is_public": True})
    db.add("portfolios", {"id": 2, "user_id": 11, "title": "Builder portfolio", "is_public": False})
    db.add("portfolio_projects", {"id": 1, "portfolio_id": 1, "title": "Published", "is_published": True,
                                  "order_index": 0})
    db.add("portfolio_projects", {"id": 2, "portfolio_id": 1, "title": "Draft", "is_published": False,
                                  "order_index": 1})
    db.add("portfolio_projects", {"id": 3, "portfolio_id": 2, "title": "Private", "is_published": True,
                                  "order_index": 0})


# ============================================================
# Fixtures
# ============================================================
@pytest.fixture
def fake_db():
    """Seeded in-memory Supabase, patched everywhere the client is fetched."""
    db = FakeSupabase()
    seed(db)
    with patch("core.store.get_supabase_client", return_value=db), \
         patch("dependencies.auth.get_supabase_client", return_value=db), \
         patch("core.supabase_client.get_supabase_client", return_value=db):
        yield db


@pytest.fixture
def fake_s3():
    s3 = FakeS3()
    with patch("core.blob_store.get_s3", return_value=(s3, "test-bucket")):
        yield s3


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app, fake_db, fake_s3) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer token-{user_id}"}


def principal(user_id: int, role: str, status: str = "ACTIVE") -> Principal:
    return Principal(id=user_id, email=f"user{user_id}@example.com", role=role, status=status)
