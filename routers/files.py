# routers/files.py

from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user
from core.media import stream_media
from models.access import Principal
from models.enums import ResourceKind

router = APIRouter(
    prefix="/files",
    tags=["Files"],
)

"""
Protected byte streaming for object media.

Files are addressed by (object_id, filename). The row is looked up
inside that object only, so a filename from another object is a 404.
Customers only get items flagged is_visible_to_customer.
"""


@router.get("/photos/{object_id}/{filename}", summary="Stream a photo")
def get_photo_file(
    object_id: int,
    filename: str,
    current_user: Principal = Depends(get_current_user),
):
    return stream_media(current_user, ResourceKind.photo, object_id, filename)


@router.get("/videos/{object_id}/{filename}", summary="Stream a video")
def get_video_file(
    object_id: int,
    filename: str,
    current_user: Principal = Depends(get_current_user),
):
    return stream_media(current_user, ResourceKind.video, object_id, filename)
