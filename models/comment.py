from typing import List, Optional
from pydantic import BaseModel, field_validator
from datetime import datetime


# -------------------------------------------------------------------
# CREATE MODEL (incoming from client)
# -------------------------------------------------------------------
class CommentCreate(BaseModel):
    text: str

    @field_validator("text", mode="before")
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


# -------------------------------------------------------------------
# READ MODEL (Supabase → API response)
# Parent is either photo_id or model_id depending on the table.
# -------------------------------------------------------------------
class CommentRead(BaseModel):
    id: int
    author_user_id: int
    text: str
    photo_id: Optional[int] = None
    model_id: Optional[int] = None
    is_visible_to_customer: bool = True
    is_admin_comment: bool = False
    can_delete: bool = False
    created_at: Optional[datetime] = None

    @field_validator("created_at", mode="before")
    def normalize_timestamps(cls, v):
        if isinstance(v, str) and v.endswith("Z"):
            return v.replace("Z", "+00:00")
        return v


class CommentResponse(BaseModel):
    comment: CommentRead


class CommentList(BaseModel):
    comments: List[CommentRead]
