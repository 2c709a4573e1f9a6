# routers/videos.py

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from dependencies.auth import get_current_user
from core import media
from core.ownership import load_media
from core.visibility import set_visibility
from models.access import Principal
from models.enums import ResourceKind
from models.media import MoveToFolder, VideoList, VideoResponse, VisibilityUpdate

router = APIRouter(tags=["Videos"])


@router.get("/objects/{object_id}/videos", response_model=VideoList, summary="List videos of an object")
def list_videos(
    object_id: int,
    folder_id: Optional[int] = Query(None),
    current_user: Principal = Depends(get_current_user),
):
    result = media.list_object_media(current_user, ResourceKind.video, object_id, folder_id)
    return {"videos": result["items"], "folders": result["folders"]}


@router.post("/objects/{object_id}/videos", status_code=201, response_model=VideoResponse, summary="Upload a video")
async def upload_video(
    object_id: int,
    file: UploadFile = File(...),
    folder_id: Optional[int] = Form(None),
    current_user: Principal = Depends(get_current_user),
):
    row = await media.upload_media(current_user, ResourceKind.video, object_id, file, folder_id)
    return {"video": row}


@router.put("/videos/{video_id}/visibility", response_model=VideoResponse, summary="Show or hide a video for the customer")
def update_video_visibility(
    video_id: int,
    payload: VisibilityUpdate,
    current_user: Principal = Depends(get_current_user),
):
    video = load_media(ResourceKind.video, video_id)
    return {"video": set_visibility(current_user, video, payload.is_visible_to_customer)}


@router.put("/videos/{video_id}/move", response_model=VideoResponse, summary="Move a video into a folder")
def move_video(
    video_id: int,
    payload: MoveToFolder,
    current_user: Principal = Depends(get_current_user),
):
    return {"video": media.move_media(current_user, ResourceKind.video, video_id, payload.folder_id)}
