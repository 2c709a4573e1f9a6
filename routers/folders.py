# routers/folders.py

from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user
from core import store
from core.access import require_access
from core.ownership import load_folder, load_object
from models.access import Principal
from models.enums import Action
from models.media import FolderCreate, FolderList, FolderResponse, FolderUpdate

router = APIRouter(
    prefix="/objects/{object_id}/folders",
    tags=["Folders"],
)

"""
Folders group photos and videos inside one object.
Listing needs view access to the object; every mutation needs the
same instance access as the object itself (manage_folders).
"""


@router.get("", response_model=FolderList, summary="List folders of an object")
def list_folders(object_id: int, current_user: Principal = Depends(get_current_user)):
    require_access(current_user, Action.view_object, load_object(object_id))
    rows = store.fetch_many(store.FOLDERS, filters={"object_id": object_id}, order_by="order_index")
    return {"folders": rows}


@router.post("", status_code=201, response_model=FolderResponse, summary="Create a folder")
def create_folder(
    object_id: int,
    payload: FolderCreate,
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.manage_folders, load_object(object_id))

    row = store.insert_row(store.FOLDERS, {
        "object_id": object_id,
        "name": payload.name.strip(),
        "order_index": payload.order_index or 0,
    })
    return {"folder": row}


@router.put("/{folder_id}", response_model=FolderResponse, summary="Rename or reorder a folder")
def update_folder(
    object_id: int,
    folder_id: int,
    payload: FolderUpdate,
    current_user: Principal = Depends(get_current_user),
):
    folder = require_access(current_user, Action.manage_folders, load_folder(folder_id, object_id))

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        return {"folder": folder.row}

    updated = store.update_row(store.FOLDERS, folder_id, changes)
    return {"folder": updated or {**folder.row, **changes}}


@router.delete("/{folder_id}", summary="Delete a folder (media move back to 'All')")
def delete_folder(
    object_id: int,
    folder_id: int,
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.manage_folders, load_folder(folder_id, object_id))

    store.detach_folder_media(folder_id)
    store.delete_rows(store.FOLDERS, id=folder_id)
    return {"status": "deleted", "id": folder_id}
