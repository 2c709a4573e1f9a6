# models/media.py

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


def _parse_timestamp(value):
    if isinstance(value, str) and value.endswith("Z"):
        return value.replace("Z", "+00:00")
    return value


# ======================================================
# PHOTO / VIDEO / BIM MODEL
# ======================================================

class MediaRead(BaseModel):
    """
    Shared read shape for photos, videos and BIM models.
    """
    id: int
    object_id: int
    filename: str
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    folder_id: Optional[int] = None
    is_visible_to_customer: bool = True
    uploaded_by: Optional[int] = None
    uploaded_at: Optional[datetime] = None

    @field_validator("uploaded_at", mode="before")
    def normalize_uploaded_at(cls, v):
        return _parse_timestamp(v)


class VisibilityUpdate(BaseModel):
    is_visible_to_customer: bool = Field(..., description="Whether customers may see this resource")


class MoveToFolder(BaseModel):
    folder_id: Optional[int] = Field(None, description="Target folder; null moves to 'All'")


# ======================================================
# FOLDERS
# ======================================================

class FolderCreate(BaseModel):
    name: str = Field(..., min_length=1)
    order_index: Optional[int] = 0


class FolderUpdate(BaseModel):
    name: Optional[str] = None
    order_index: Optional[int] = None


class FolderRead(BaseModel):
    id: int
    object_id: int
    name: str
    order_index: Optional[int] = 0


class FolderResponse(BaseModel):
    folder: FolderRead


class FolderList(BaseModel):
    folders: List[FolderRead]


# ======================================================
# RESPONSE ENVELOPES
# ======================================================

class PhotoResponse(BaseModel):
    photo: MediaRead


class PhotoList(BaseModel):
    photos: List[MediaRead]
    folders: List[FolderRead] = []


class VideoResponse(BaseModel):
    video: MediaRead


class VideoList(BaseModel):
    videos: List[MediaRead]
    folders: List[FolderRead] = []


class BimModelResponse(BaseModel):
    model: MediaRead


class BimModelList(BaseModel):
    models: List[MediaRead]


# ======================================================
# BIM PARAMETER TREE
# ======================================================

class ParameterTreeSave(BaseModel):
    tree: Optional[Dict[str, Any]] = None
