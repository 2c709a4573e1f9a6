# models/download.py

from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class DownloadableItemRead(BaseModel):
    """Catalog item with the caller's entitlement flags attached."""
    id: int
    name: str
    description: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[str] = None
    filename: str
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    price: Optional[Decimal] = Field(None, allow_inf_nan=True, description="null or 0 means free")
    status: Optional[str] = None
    download_count: int = 0
    external_product_id: Optional[str] = Field(None, description="Product id on the commerce platform")
    created_at: Optional[datetime] = None

    is_free: bool = False
    is_purchased: bool = False
    can_download: bool = False


class PurchaseRead(BaseModel):
    user_id: int
    item_id: int
    status: str = Field(default="pending", description="Payment status: pending, paid, failed, refunded")
    amount: Optional[Decimal] = Field(None, allow_inf_nan=True)
    currency: Optional[str] = None
    purchased_at: Optional[datetime] = None


class DownloadableItemResponse(BaseModel):
    item: DownloadableItemRead


class DownloadableItemList(BaseModel):
    items: List[DownloadableItemRead]


class PurchaseResponse(BaseModel):
    success: bool = True
    purchase: PurchaseRead
    payment: Optional[Dict[str, Any]] = None
    requires_payment: bool = False
    external_product_id: Optional[str] = None
    message: Optional[str] = None
