# routers/photos.py

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from dependencies.auth import get_current_user
from core import comments, media
from core.ownership import load_comment, load_media
from core.visibility import set_visibility
from models.access import Principal
from models.comment import CommentCreate, CommentList, CommentResponse
from models.enums import ResourceKind
from models.media import MoveToFolder, PhotoList, PhotoResponse, VisibilityUpdate

router = APIRouter(tags=["Photos"])


# -----------------------------------------------------
# Object photos
# -----------------------------------------------------
@router.get("/objects/{object_id}/photos", response_model=PhotoList, summary="List photos of an object")
def list_photos(
    object_id: int,
    folder_id: Optional[int] = Query(None),
    current_user: Principal = Depends(get_current_user),
):
    result = media.list_object_media(current_user, ResourceKind.photo, object_id, folder_id)
    return {"photos": result["items"], "folders": result["folders"]}


@router.post("/objects/{object_id}/photos", status_code=201, response_model=PhotoResponse, summary="Upload a photo")
async def upload_photo(
    object_id: int,
    file: UploadFile = File(...),
    folder_id: Optional[int] = Form(None),
    current_user: Principal = Depends(get_current_user),
):
    row = await media.upload_media(current_user, ResourceKind.photo, object_id, file, folder_id)
    return {"photo": row}


# -----------------------------------------------------
# Visibility / folder membership
# -----------------------------------------------------
@router.put("/photos/{photo_id}/visibility", response_model=PhotoResponse, summary="Show or hide a photo for the customer")
def update_photo_visibility(
    photo_id: int,
    payload: VisibilityUpdate,
    current_user: Principal = Depends(get_current_user),
):
    photo = load_media(ResourceKind.photo, photo_id)
    return {"photo": set_visibility(current_user, photo, payload.is_visible_to_customer)}


@router.put("/photos/{photo_id}/move", response_model=PhotoResponse, summary="Move a photo into a folder")
def move_photo(
    photo_id: int,
    payload: MoveToFolder,
    current_user: Principal = Depends(get_current_user),
):
    return {"photo": media.move_media(current_user, ResourceKind.photo, photo_id, payload.folder_id)}


# -----------------------------------------------------
# Comments
# -----------------------------------------------------
@router.get("/photos/{photo_id}/comments", response_model=CommentList, summary="List comments on a photo")
def list_photo_comments(photo_id: int, current_user: Principal = Depends(get_current_user)):
    photo = load_media(ResourceKind.photo, photo_id)
    return {"comments": comments.list_comments(current_user, ResourceKind.photo_comment, photo)}


@router.post("/photos/{photo_id}/comments", status_code=201, response_model=CommentResponse, summary="Comment on a photo")
def create_photo_comment(
    photo_id: int,
    payload: CommentCreate,
    current_user: Principal = Depends(get_current_user),
):
    photo = load_media(ResourceKind.photo, photo_id)
    row = comments.create_comment(current_user, ResourceKind.photo_comment, photo, payload.text)
    return {"comment": row}


@router.delete("/photos/{photo_id}/comments/{comment_id}", summary="Delete a photo comment (author or admin)")
def delete_photo_comment(
    photo_id: int,
    comment_id: int,
    current_user: Principal = Depends(get_current_user),
):
    comment = load_comment(ResourceKind.photo_comment, comment_id, photo_id)
    comments.delete_comment(current_user, comment)
    return {"success": True}


@router.put(
    "/photos/{photo_id}/comments/{comment_id}/visibility",
    response_model=CommentResponse,
    summary="Show or hide a photo comment for the customer (author or admin)",
)
def update_photo_comment_visibility(
    photo_id: int,
    comment_id: int,
    payload: VisibilityUpdate,
    current_user: Principal = Depends(get_current_user),
):
    comment = load_comment(ResourceKind.photo_comment, comment_id, photo_id)
    return {"comment": set_visibility(current_user, comment, payload.is_visible_to_customer)}
