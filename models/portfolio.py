# models/portfolio.py

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class PortfolioUpdate(BaseModel):
    """Partial upsert of the caller's own portfolio."""
    title: Optional[str] = None
    bio: Optional[str] = None
    specialization: Optional[str] = None
    avatar_url: Optional[str] = None
    cover_url: Optional[str] = None
    is_public: Optional[bool] = None


class PortfolioProjectCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    order_index: Optional[int] = Field(None, description="Defaults to the end of the list")
    is_published: bool = True

    @field_validator("title", mode="before")
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class PortfolioProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None
    order_index: Optional[int] = None
