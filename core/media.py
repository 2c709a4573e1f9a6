# core/media.py

"""
Photo / video / BIM model operations shared by the object-scoped
routers and the streaming endpoints. Every function loads the target
through core.ownership and authorizes through core.access before it
touches rows or bytes.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, UploadFile
from fastapi.responses import Response

from core import blob_store, store
from core.access import require_access
from core.config import settings
from core.logging_config import logger
from core.ownership import MEDIA_TABLES, load_folder, load_media, load_media_by_filename, load_object
from models.access import Principal
from models.enums import Action, ResourceKind, Role


READ_ACTIONS = {
    ResourceKind.photo: Action.view_photo,
    ResourceKind.video: Action.view_video,
    ResourceKind.bim_model: Action.view_bim_model,
}

BLOB_FOLDERS = {
    ResourceKind.photo: "photos",
    ResourceKind.video: "videos",
    ResourceKind.bim_model: "models",
}

DEFAULT_MIME = {
    ResourceKind.photo: "image/jpeg",
    ResourceKind.video: "video/mp4",
    ResourceKind.bim_model: "application/octet-stream",
}


# -----------------------------------------------------
# Listing
# -----------------------------------------------------
def list_object_media(
    principal: Principal,
    kind: ResourceKind,
    object_id: int,
    folder_id: Optional[int] = None,
) -> dict:
    obj = load_object(object_id)
    require_access(principal, Action.view_object, obj)

    # Customers never see hidden items in listings
    visible_only = principal.role == Role.customer

    items = store.list_media(MEDIA_TABLES[kind], object_id, folder_id=folder_id, visible_only=visible_only)
    result = {"items": items}

    if kind != ResourceKind.bim_model:
        result["folders"] = store.fetch_many(
            store.FOLDERS,
            filters={"object_id": object_id},
            order_by="order_index",
        )

    return result


# -----------------------------------------------------
# Upload
# -----------------------------------------------------
async def upload_media(
    principal: Principal,
    kind: ResourceKind,
    object_id: int,
    file: UploadFile,
    folder_id: Optional[int] = None,
) -> dict:
    obj = load_object(object_id)
    require_access(principal, Action.upload_media, obj)

    if folder_id is not None:
        load_folder(folder_id, object_id)

    if not file.filename or not file.filename.strip():
        raise HTTPException(400, "filename is required and cannot be empty")

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    filename = f"{stamp}_{blob_store.safe_filename(file.filename.strip())}"
    content = await file.read()
    content_type = file.content_type or DEFAULT_MIME[kind]

    blob_store.put_blob(
        blob_store.media_key(object_id, BLOB_FOLDERS[kind], filename),
        content,
        content_type,
    )

    row = store.insert_row(MEDIA_TABLES[kind], {
        "object_id": object_id,
        "filename": filename,
        "original_name": file.filename,
        "mime_type": content_type,
        "file_size": len(content),
        "folder_id": folder_id,
        "is_visible_to_customer": True,
        "uploaded_by": principal.id,
        "uploaded_at": datetime.now(timezone.utc).isoformat(),
    })

    logger.info(f"{kind} {row.get('id')} uploaded to object {object_id} by user {principal.id}")
    return row


# -----------------------------------------------------
# Streaming
# -----------------------------------------------------
def stream_media(
    principal: Principal,
    kind: ResourceKind,
    object_id: int,
    filename: str,
    disposition: Optional[str] = None,
) -> Response:
    resource = load_media_by_filename(kind, object_id, filename)
    require_access(principal, READ_ACTIONS[kind], resource)
    return media_response(kind, resource.row, disposition)


def media_response(kind: ResourceKind, row: dict, disposition: Optional[str] = None) -> Response:
    blob = blob_store.get_blob(
        blob_store.media_key(row["object_id"], BLOB_FOLDERS[kind], row["filename"]),
        DEFAULT_MIME[kind],
    )

    headers = {
        "Content-Length": str(blob.length),
        "Cache-Control": f"private, max-age={settings.FILE_CACHE_SECONDS}",
    }
    if disposition:
        name = row.get("original_name") or row["filename"]
        headers["Content-Disposition"] = f'{disposition}; filename="{blob_store.safe_filename(name)}"'

    return Response(
        content=blob.body,
        media_type=row.get("mime_type") or blob.content_type,
        headers=headers,
    )


# -----------------------------------------------------
# Folder membership
# -----------------------------------------------------
def move_media(principal: Principal, kind: ResourceKind, media_id: int, folder_id: Optional[int]) -> dict:
    resource = load_media(kind, media_id)
    require_access(principal, Action.move_media, resource)

    if folder_id is not None:
        # Folder must belong to the same object
        load_folder(folder_id, resource.chain.object_id)

    updated = store.update_row(MEDIA_TABLES[kind], media_id, {"folder_id": folder_id})
    return updated or {**resource.row, "folder_id": folder_id}
