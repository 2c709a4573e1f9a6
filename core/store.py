# core/store.py

"""
Storage boundary over Supabase (PostgREST).

Every authorization fact (role, assignment, ownership, visibility,
purchase status) is read here on demand, per request. Nothing in this
module caches. Any client failure is raised as StoreUnavailable so the
caller can abort instead of mistaking it for a Deny.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

from core.errors import StoreUnavailable, extract_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client


# -----------------------------------------------------
# Table names
# -----------------------------------------------------
USERS = "users"
OBJECTS = "objects"
ASSIGNMENTS = "object_assignments"
PHOTOS = "photos"
VIDEOS = "videos"
BIM_MODELS = "bim_models"
PHOTO_COMMENTS = "photo_comments"
MODEL_COMMENTS = "model_comments"
FOLDERS = "folders"
DOWNLOADABLE_ITEMS = "downloadable_items"
PURCHASES = "download_purchases"
PAYMENTS = "payments"
PORTFOLIOS = "portfolios"
PORTFOLIO_PROJECTS = "portfolio_projects"


# -----------------------------------------------------
# Low-level helpers
# -----------------------------------------------------
def _client():
    client = get_supabase_client()
    if client is None:
        raise StoreUnavailable("Supabase client", "not configured")
    return client


def _execute(build, operation: str) -> List[Dict[str, Any]]:
    """
    Run a query built by `build(client)` and return its rows.
    """
    client = _client()
    try:
        result = build(client).execute()
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.error(f"{operation} failed: {detail}")
        raise StoreUnavailable(operation, detail) from e
    return result.data or []


def fetch_one(table: str, **filters) -> Optional[Dict[str, Any]]:
    def build(client):
        query = client.table(table).select("*")
        for column, value in filters.items():
            query = query.eq(column, value)
        return query.limit(1)

    rows = _execute(build, f"Fetch {table}")
    return rows[0] if rows else None


def fetch_many(
    table: str,
    filters: Optional[Dict[str, Any]] = None,
    in_filters: Optional[Dict[str, Iterable[Any]]] = None,
    order_by: Optional[str] = None,
    desc: bool = False,
) -> List[Dict[str, Any]]:
    def build(client):
        query = client.table(table).select("*")
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        for column, values in (in_filters or {}).items():
            query = query.in_(column, list(values))
        if order_by:
            query = query.order(order_by, desc=desc)
        return query

    return _execute(build, f"List {table}")


def insert_row(table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    rows = _execute(
        lambda client: client.table(table).insert(payload),
        f"Insert {table}",
    )
    if not rows:
        raise StoreUnavailable(f"Insert {table}", "insert returned no data")
    return rows[0]


def update_row(table: str, row_id: Any, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    rows = _execute(
        lambda client: client.table(table).update(changes).eq("id", row_id),
        f"Update {table}",
    )
    return rows[0] if rows else None


def delete_rows(table: str, **filters) -> int:
    def build(client):
        query = client.table(table).delete()
        for column, value in filters.items():
            query = query.eq(column, value)
        return query

    return len(_execute(build, f"Delete {table}"))


# -----------------------------------------------------
# Users
# -----------------------------------------------------
def get_user(user_id: int) -> Optional[Dict[str, Any]]:
    return fetch_one(USERS, id=user_id)


def get_user_by_auth_id(auth_user_id: str) -> Optional[Dict[str, Any]]:
    return fetch_one(USERS, auth_user_id=auth_user_id)


def search_users(query: str, roles: Iterable[str], limit: int = 10) -> List[Dict[str, Any]]:
    """Case-insensitive match on email or name among ACTIVE users."""
    # PostgREST or-filters are comma separated; keep the term a single token
    term = re.sub(r"[,()%*]", " ", query).strip()
    pattern = f"%{term}%"

    def build(client):
        return (
            client.table(USERS)
            .select("id,email,name,role")
            .eq("status", "ACTIVE")
            .in_("role", list(roles))
            .or_(f"email.ilike.{pattern},name.ilike.{pattern}")
            .order("email")
            .limit(limit)
        )

    return _execute(build, "Search users")


# -----------------------------------------------------
# Objects + assignments
# -----------------------------------------------------
def get_object(object_id: int) -> Optional[Dict[str, Any]]:
    return fetch_one(OBJECTS, id=object_id)


def is_assigned(user_id: int, object_id: int) -> bool:
    """Set-membership over object_assignments; read fresh every call."""
    def build(client):
        return (
            client.table(ASSIGNMENTS)
            .select("id")
            .eq("user_id", user_id)
            .eq("object_id", object_id)
            .limit(1)
        )

    return bool(_execute(build, "Assignment lookup"))


def list_assigned_object_ids(user_id: int) -> List[int]:
    rows = fetch_many(ASSIGNMENTS, filters={"user_id": user_id})
    return [row["object_id"] for row in rows]


def upsert_assignment(user_id: int, object_id: int) -> Dict[str, Any]:
    rows = _execute(
        lambda client: client.table(ASSIGNMENTS).upsert(
            {"user_id": user_id, "object_id": object_id},
            on_conflict="user_id,object_id",
        ),
        "Upsert assignment",
    )
    return rows[0] if rows else {"user_id": user_id, "object_id": object_id}


# -----------------------------------------------------
# Media (photos / videos / BIM models)
# -----------------------------------------------------
def find_media_by_filename(table: str, object_id: int, filename: str) -> Optional[Dict[str, Any]]:
    return fetch_one(table, object_id=object_id, filename=filename)


def list_media(
    table: str,
    object_id: int,
    folder_id: Optional[int] = None,
    visible_only: bool = False,
) -> List[Dict[str, Any]]:
    filters: Dict[str, Any] = {"object_id": object_id}
    if folder_id is not None:
        filters["folder_id"] = folder_id
    if visible_only:
        filters["is_visible_to_customer"] = True
    return fetch_many(table, filters=filters, order_by="uploaded_at", desc=True)


def detach_folder_media(folder_id: int) -> None:
    for table in (PHOTOS, VIDEOS):
        _execute(
            lambda client, t=table: client.table(t).update({"folder_id": None}).eq("folder_id", folder_id),
            f"Detach {table} from folder",
        )


# -----------------------------------------------------
# Downloadable items + purchases
# -----------------------------------------------------
def get_purchase(user_id: int, item_id: int) -> Optional[Dict[str, Any]]:
    return fetch_one(PURCHASES, user_id=user_id, item_id=item_id)


def list_paid_item_ids(user_id: int) -> List[int]:
    rows = fetch_many(PURCHASES, filters={"user_id": user_id, "status": "paid"})
    return [row["item_id"] for row in rows]


def upsert_purchase(payload: Dict[str, Any]) -> Dict[str, Any]:
    rows = _execute(
        lambda client: client.table(PURCHASES).upsert(payload, on_conflict="user_id,item_id"),
        "Upsert purchase",
    )
    if not rows:
        raise StoreUnavailable("Upsert purchase", "upsert returned no data")
    return rows[0]


def increment_download_count(item_id: int) -> None:
    """
    Atomic `download_count = download_count + 1` via a Postgres function
    (see database/schema.sql).
    """
    _execute(
        lambda client: client.rpc("increment_download_count", {"item_id": item_id}),
        "Increment download count",
    )
