# routers/objects.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from dependencies.auth import get_current_user
from core import blob_store, store
from core.access import require_access
from core.errors import NotFoundError
from core.logging_config import logger
from core.media import BLOB_FOLDERS
from core.ownership import MEDIA_TABLES, load_object
from models.access import Principal, ResourceContext
from models.enums import Action, ResourceKind, Role
from models.site_object import (
    AssignmentCreate,
    AssignmentList,
    AssignmentResponse,
    SiteObjectCreate,
    SiteObjectList,
    SiteObjectResponse,
    SiteObjectUpdate,
)

router = APIRouter(
    prefix="/objects",
    tags=["Objects"],
)


# -----------------------------------------------------
# LIST OBJECTS (scoped by role)
#   CUSTOMER          → own objects
#   DESIGNER/BUILDER  → assigned objects
#   ADMIN             → all objects
# -----------------------------------------------------
@router.get("", response_model=SiteObjectList, summary="List objects visible to the caller")
def list_objects(current_user: Principal = Depends(get_current_user)):
    if current_user.role == Role.customer:
        rows = store.fetch_many(
            store.OBJECTS,
            filters={"owner_user_id": current_user.id},
            order_by="created_at",
            desc=True,
        )
    elif current_user.role in (Role.designer, Role.builder):
        object_ids = store.list_assigned_object_ids(current_user.id)
        rows = store.fetch_many(
            store.OBJECTS,
            in_filters={"id": object_ids},
            order_by="created_at",
            desc=True,
        ) if object_ids else []
    elif current_user.role == Role.admin:
        rows = store.fetch_many(store.OBJECTS, order_by="created_at", desc=True)
    else:
        rows = []

    return {"objects": rows}


# -----------------------------------------------------
# CREATE OBJECT
# -----------------------------------------------------
@router.post("", status_code=201, response_model=SiteObjectResponse, summary="Create an object")
def create_object(
    payload: SiteObjectCreate,
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.create_object, ResourceContext(kind=ResourceKind.object))

    row = store.insert_row(store.OBJECTS, {
        "title": payload.title.strip(),
        "address": payload.address,
        "description": payload.description,
        "owner_user_id": current_user.id,
        "status": "ACTIVE",
        "created_at": datetime.now(timezone.utc).isoformat(),
    })

    logger.info(f"Object {row.get('id')} created by user {current_user.id}")
    return {"object": row}


# -----------------------------------------------------
# GET OBJECT
# -----------------------------------------------------
@router.get("/{object_id}", response_model=SiteObjectResponse, summary="Get one object")
def get_object(object_id: int, current_user: Principal = Depends(get_current_user)):
    obj = require_access(current_user, Action.view_object, load_object(object_id))
    return {"object": obj.row}


# -----------------------------------------------------
# UPDATE OBJECT
#   CUSTOMER owner, assigned DESIGNER, ADMIN
# -----------------------------------------------------
@router.put("/{object_id}", response_model=SiteObjectResponse, summary="Update an object")
def update_object(
    object_id: int,
    payload: SiteObjectUpdate,
    current_user: Principal = Depends(get_current_user),
):
    obj = require_access(current_user, Action.update_object, load_object(object_id))

    changes = payload.model_dump(exclude_unset=True)
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise HTTPException(400, "title cannot be empty")
        changes["title"] = title
    if "status" in changes and not changes["status"]:
        changes.pop("status")

    if not changes:
        return {"object": obj.row}

    row = store.update_row(store.OBJECTS, object_id, changes)
    if not row:
        raise NotFoundError("Object")

    logger.info(f"Object {object_id} updated by user {current_user.id}")
    return {"object": row}


# -----------------------------------------------------
# DELETE OBJECT
#   CUSTOMER owner, ADMIN
# Rows below the object go with it (ON DELETE CASCADE);
# stored media bytes are removed afterwards.
# -----------------------------------------------------
@router.delete("/{object_id}", summary="Delete an object")
def delete_object(object_id: int, current_user: Principal = Depends(get_current_user)):
    require_access(current_user, Action.delete_object, load_object(object_id))

    blob_keys = []
    for kind, table in MEDIA_TABLES.items():
        for row in store.fetch_many(table, filters={"object_id": object_id}):
            blob_keys.append(blob_store.media_key(object_id, BLOB_FOLDERS[kind], row["filename"]))
            if kind == ResourceKind.bim_model:
                blob_keys.append(blob_store.tree_key(object_id, row["id"]))

    store.delete_rows(store.OBJECTS, id=object_id)

    for key in blob_keys:
        blob_store.delete_blob(key)

    logger.info(f"Object {object_id} deleted by user {current_user.id} ({len(blob_keys)} blobs removed)")
    return {"success": True, "id": object_id}


# -----------------------------------------------------
# ASSIGNMENTS
# -----------------------------------------------------
@router.get("/{object_id}/assignments", response_model=AssignmentList, summary="List users assigned to an object")
def list_assignments(object_id: int, current_user: Principal = Depends(get_current_user)):
    require_access(current_user, Action.view_object, load_object(object_id))

    rows = store.fetch_many(store.ASSIGNMENTS, filters={"object_id": object_id})
    user_ids = [row["user_id"] for row in rows]
    users = {
        u["id"]: {k: u.get(k) for k in ("id", "email", "name", "role")}
        for u in (store.fetch_many(store.USERS, in_filters={"id": user_ids}) if user_ids else [])
    }

    return {
        "assignments": [
            {"user_id": row["user_id"], "object_id": object_id, "user": users.get(row["user_id"])}
            for row in rows
        ]
    }


@router.post(
    "/{object_id}/assignments",
    status_code=201,
    response_model=AssignmentResponse,
    summary="Assign a designer or builder (admin)",
)
def create_assignment(
    object_id: int,
    payload: AssignmentCreate,
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.manage_assignments, load_object(object_id))

    user = store.get_user(payload.user_id)
    if not user:
        raise NotFoundError("User")
    if user.get("role") not in (Role.designer, Role.builder):
        raise HTTPException(400, "Only designers and builders can be assigned to objects")

    store.upsert_assignment(payload.user_id, object_id)
    logger.info(f"User {payload.user_id} assigned to object {object_id} by {current_user.id}")
    return {"assignment": {"user_id": payload.user_id, "object_id": object_id}}


@router.delete("/{object_id}/assignments/{user_id}", summary="Remove an assignment (admin)")
def delete_assignment(
    object_id: int,
    user_id: int,
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.manage_assignments, load_object(object_id))

    removed = store.delete_rows(store.ASSIGNMENTS, object_id=object_id, user_id=user_id)
    if not removed:
        raise NotFoundError("Assignment")

    logger.info(f"User {user_id} unassigned from object {object_id} by {current_user.id}")
    return {"status": "deleted", "object_id": object_id, "user_id": user_id}
