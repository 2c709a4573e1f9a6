# models/site_object.py

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


def _parse_timestamp(value):
    if isinstance(value, str) and value.endswith("Z"):
        return value.replace("Z", "+00:00")
    return value


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class SiteObjectBase(BaseModel):
    title: str = Field(..., min_length=1, description="Construction site title (required)")
    address: Optional[str] = None
    description: Optional[str] = None


# -------------------------------------------------
# Create
# -------------------------------------------------
class SiteObjectCreate(SiteObjectBase):
    """
    Owner is always the caller; never taken from the body.
    """
    pass


# -------------------------------------------------
# Update (partial)
# -------------------------------------------------
class SiteObjectUpdate(BaseModel):
    title: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


# -------------------------------------------------
# Read (Supabase → API response)
# -------------------------------------------------
class SiteObjectRead(SiteObjectBase):
    id: int
    owner_user_id: int
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("created_at", mode="before")
    def normalize_created_at(cls, v):
        return _parse_timestamp(v)


class SiteObjectResponse(BaseModel):
    object: SiteObjectRead


class SiteObjectList(BaseModel):
    objects: List[SiteObjectRead]


# -------------------------------------------------
# Assignments
# -------------------------------------------------
class AssignmentCreate(BaseModel):
    user_id: int


class AssignmentRead(BaseModel):
    user_id: int
    object_id: int
    user: Optional[Dict[str, Any]] = None


class AssignmentResponse(BaseModel):
    assignment: AssignmentRead


class AssignmentList(BaseModel):
    assignments: List[AssignmentRead]
