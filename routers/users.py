# routers/users.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dependencies.auth import get_current_user
from core import store
from core.access import decide, require_access
from core.errors import NotFoundError
from core.ownership import object_context, user_directory_context
from models.access import Principal
from models.enums import Action, Role, UserStatus

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)

"""
USER DIRECTORY

- CUSTOMER only ever sees the designers and builders working on its
  own objects.
- DESIGNER / BUILDER / ADMIN see active customers, designers and builders.
- A user's object list is filtered through decide(view_object), so it
  never reveals an object the caller could not open directly.
"""

STAFF_ROLES = [Role.designer.value, Role.builder.value]
DIRECTORY_ROLES = [Role.customer.value, *STAFF_ROLES]

PUBLIC_FIELDS = ("id", "email", "name", "role")


def _summary(row: dict) -> dict:
    return {k: row.get(k) for k in PUBLIC_FIELDS}


def _visible_roles(current_user: Principal, role: Optional[str]) -> list:
    allowed = STAFF_ROLES if current_user.role == Role.customer else DIRECTORY_ROLES
    if role:
        return [role] if role in allowed else []
    return allowed


def _customer_team_ids(customer_id: int) -> set:
    """Users assigned to any object the customer owns."""
    object_ids = [o["id"] for o in store.fetch_many(store.OBJECTS, filters={"owner_user_id": customer_id})]
    if not object_ids:
        return set()
    return {a["user_id"] for a in store.fetch_many(store.ASSIGNMENTS, in_filters={"object_id": object_ids})}


def _object_counts(users: list) -> dict:
    customer_ids = [u["id"] for u in users if u.get("role") == Role.customer]
    staff_ids = [u["id"] for u in users if u.get("role") in STAFF_ROLES]

    counts = {u["id"]: 0 for u in users}
    if customer_ids:
        for obj in store.fetch_many(store.OBJECTS, in_filters={"owner_user_id": customer_ids}):
            counts[obj["owner_user_id"]] += 1
    if staff_ids:
        for assignment in store.fetch_many(store.ASSIGNMENTS, in_filters={"user_id": staff_ids}):
            counts[assignment["user_id"]] += 1
    return counts


# -----------------------------------------------------
# GET /users/list
# -----------------------------------------------------
@router.get("/list", summary="List active users visible to the caller")
def list_users(
    role: Optional[str] = Query(None, description="CUSTOMER, DESIGNER or BUILDER"),
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.view_users, user_directory_context())

    roles = _visible_roles(current_user, role)
    if not roles:
        return {"users": []}

    rows = store.fetch_many(
        store.USERS,
        filters={"status": UserStatus.active.value},
        in_filters={"role": roles},
        order_by="email",
    )

    if current_user.role == Role.customer:
        team = _customer_team_ids(current_user.id)
        rows = [row for row in rows if row["id"] in team]

    counts = _object_counts(rows)
    users = [
        {**_summary(row), "created_at": row.get("created_at"), "object_count": counts[row["id"]]}
        for row in rows
    ]
    users.sort(key=lambda u: (u["role"] or "", u["name"] or "", u["email"] or ""))
    return {"users": users}


# -----------------------------------------------------
# GET /users/search?q=
# -----------------------------------------------------
@router.get("/search", summary="Search active users by email or name")
def search_users(
    q: str = Query("", description="At least 2 characters"),
    role: Optional[str] = Query(None, description="DESIGNER or BUILDER"),
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.view_users, user_directory_context())

    query = q.strip()
    if len(query) < 2:
        raise HTTPException(400, "Search needs at least 2 characters")

    roles = _visible_roles(current_user, role)
    if not roles:
        return {"users": []}

    return {"users": [_summary(row) for row in store.search_users(query, roles)]}


# -----------------------------------------------------
# GET /users/{user_id}/objects
# -----------------------------------------------------
@router.get("/{user_id}/objects", summary="Objects a user owns or is assigned to")
def list_user_objects(user_id: int, current_user: Principal = Depends(get_current_user)):
    require_access(current_user, Action.view_users, user_directory_context())

    target = store.get_user(user_id)
    if not target:
        raise NotFoundError("User")

    if target.get("role") == Role.customer:
        rows = store.fetch_many(
            store.OBJECTS,
            filters={"owner_user_id": user_id},
            order_by="created_at",
            desc=True,
        )
    elif target.get("role") in STAFF_ROLES:
        object_ids = store.list_assigned_object_ids(user_id)
        rows = store.fetch_many(
            store.OBJECTS,
            in_filters={"id": object_ids},
            order_by="created_at",
            desc=True,
        ) if object_ids else []
    else:
        rows = []

    objects = [row for row in rows if decide(current_user, Action.view_object, object_context(row)).allowed]
    return {"user": _summary(target), "objects": objects}
