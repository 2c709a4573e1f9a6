# routers/downloads.py

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response

from dependencies.auth import get_current_user
from core import blob_store, store
from core.access import require_access
from core.config import is_commerce_configured, settings
from core.entitlements import annotate_item, is_free, record_download, require_download
from core.logging_config import logger
from core.ownership import catalog_context, load_downloadable_item
from models.access import Principal
from models.download import DownloadableItemList, DownloadableItemResponse, PurchaseResponse
from models.enums import Action, ItemStatus, PurchaseStatus

router = APIRouter(
    prefix="/downloads",
    tags=["Downloads"],
)

"""
DOWNLOADS (global catalog, not object-scoped)

- Any role may browse and download; paid items need a `paid` purchase
  row for exactly (user, item) at download time.
- Only DESIGNER and ADMIN manage the catalog.
"""

# Keywords for the program filter
PROGRAM_KEYWORDS = {
    "archicad": ["archicad"],
    "revit": ["revit"],
    "russian": [
        "renga", "ренга",
        "nanocad", "нанокад",
        "компас", "kompas",
        "лира", "lira",
        "к3", "k3",
        "российск", "russian", "россия",
        "отечественн", "domestic",
    ],
}


def _matches_program(item: dict, program: str) -> bool:
    keywords = PROGRAM_KEYWORDS.get(program.lower())
    if keywords is None:
        return True

    haystack = " ".join(
        (item.get(field) or "").lower()
        for field in ("name", "description", "category", "tags")
    )
    return any(keyword in haystack for keyword in keywords)


# -----------------------------------------------------
# LIST CATALOG
# -----------------------------------------------------
@router.get("", response_model=DownloadableItemList, summary="List downloadable items")
def list_downloads(
    type: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    price: Optional[str] = Query(None, description="'free' or 'paid'"),
    program: Optional[str] = Query(None, description="'archicad', 'revit' or 'russian'"),
    my: bool = Query(False, description="Only free or purchased items"),
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.view_downloads, catalog_context())

    filters = {"status": ItemStatus.active.value}
    if type:
        filters["type"] = type
    if category:
        filters["category"] = category

    rows = store.fetch_many(store.DOWNLOADABLE_ITEMS, filters=filters, order_by="created_at", desc=True)
    paid_ids = set(store.list_paid_item_ids(current_user.id))
    items = [annotate_item(row, paid_ids) for row in rows]

    if my:
        items = [i for i in items if i["can_download"]]
    if price == "free":
        items = [i for i in items if i["is_free"]]
    elif price == "paid":
        items = [i for i in items if not i["is_free"]]
    if program:
        items = [i for i in items if _matches_program(i, program)]

    return {"items": items}


# -----------------------------------------------------
# GET ONE
# -----------------------------------------------------
@router.get("/{item_id}", response_model=DownloadableItemResponse, summary="Get a downloadable item")
def get_download(item_id: int, current_user: Principal = Depends(get_current_user)):
    item = require_access(current_user, Action.view_downloads, load_downloadable_item(item_id))
    purchase = store.get_purchase(current_user.id, item_id)
    paid_ids = [item_id] if purchase and purchase.get("status") == PurchaseStatus.paid else []
    return {"item": annotate_item(item.row, paid_ids)}


# -----------------------------------------------------
# UPLOAD (DESIGNER / ADMIN)
# -----------------------------------------------------
@router.post("", status_code=201, response_model=DownloadableItemResponse, summary="Upload a downloadable item")
async def create_download(
    file: UploadFile = File(...),
    name: str = Form(...),
    description: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    external_product_id: Optional[str] = Form(None),
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.manage_downloads, catalog_context())

    if not name.strip():
        raise HTTPException(400, "name is required")
    if not file.filename:
        raise HTTPException(400, "filename is required and cannot be empty")

    parsed_price = None
    if price not in (None, ""):
        try:
            parsed_price = Decimal(price)
        except InvalidOperation:
            raise HTTPException(400, "price must be a number")
        if not parsed_price.is_finite():
            raise HTTPException(400, "price must be a number")
        if parsed_price < 0:
            raise HTTPException(400, "price cannot be negative")

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    filename = f"{stamp}_{blob_store.safe_filename(file.filename)}"
    content = await file.read()
    content_type = file.content_type or "application/octet-stream"

    blob_store.put_blob(blob_store.download_key(filename), content, content_type)

    row = store.insert_row(store.DOWNLOADABLE_ITEMS, {
        "name": name.strip(),
        "description": description,
        "type": type,
        "category": category,
        "tags": tags,
        "filename": filename,
        "mime_type": content_type,
        "file_size": len(content),
        "price": str(parsed_price) if parsed_price is not None else None,
        "external_product_id": external_product_id,
        "status": ItemStatus.active.value,
        "download_count": 0,
        "uploaded_by": current_user.id,
        "created_at": datetime.now(timezone.utc).isoformat(),
    })

    logger.info(f"Download item {row.get('id')} created by user {current_user.id}")
    return {"item": annotate_item(row, [])}


# -----------------------------------------------------
# DELETE (DESIGNER / ADMIN)
# -----------------------------------------------------
@router.delete("/{item_id}", summary="Delete a downloadable item")
def delete_download(item_id: int, current_user: Principal = Depends(get_current_user)):
    item = require_access(current_user, Action.manage_downloads, load_downloadable_item(item_id))

    store.delete_rows(store.DOWNLOADABLE_ITEMS, id=item_id)
    blob_store.delete_blob(blob_store.download_key(item.row["filename"]))

    logger.info(f"Download item {item_id} deleted by user {current_user.id}")
    return {"status": "deleted", "id": item_id}


# -----------------------------------------------------
# PURCHASE
# -----------------------------------------------------
@router.post(
    "/{item_id}/purchase",
    response_model=PurchaseResponse,
    summary="Start a purchase (free items are granted immediately)",
)
def purchase_download(item_id: int, current_user: Principal = Depends(get_current_user)):
    item = require_access(current_user, Action.download_item, load_downloadable_item(item_id))
    row = item.row
    now = datetime.now(timezone.utc).isoformat()

    if is_free(row):
        purchase = store.upsert_purchase({
            "user_id": current_user.id,
            "item_id": item_id,
            "status": PurchaseStatus.paid.value,
            "purchased_at": now,
        })
        return {
            "success": True,
            "purchase": purchase,
            "message": "Free item is available for download",
        }

    if not is_commerce_configured():
        raise HTTPException(503, "Payments are not configured")

    existing = store.get_purchase(current_user.id, item_id)
    if existing and existing.get("status") == PurchaseStatus.paid:
        raise HTTPException(400, "Item already purchased")

    purchase = store.upsert_purchase({
        "user_id": current_user.id,
        "item_id": item_id,
        "amount": str(row["price"]),
        "currency": settings.DOWNLOAD_CURRENCY,
        "status": PurchaseStatus.pending.value,
    })

    payment = store.insert_row(store.PAYMENTS, {
        "user_id": current_user.id,
        "downloadable_item_id": item_id,
        "amount": str(row["price"]),
        "currency": settings.DOWNLOAD_CURRENCY,
        "status": PurchaseStatus.pending.value,
        "created_at": now,
    })

    logger.info(f"Pending purchase of item {item_id} by user {current_user.id}")
    return {
        "success": True,
        "purchase": purchase,
        "payment": payment,
        "requires_payment": True,
        "external_product_id": row.get("external_product_id"),
        "message": "Payment required",
    }


# -----------------------------------------------------
# DOWNLOAD
# -----------------------------------------------------
@router.get("/{item_id}/download", summary="Download the item file")
def download_item(item_id: int, current_user: Principal = Depends(get_current_user)):
    row = require_download(current_user, load_downloadable_item(item_id))

    blob = blob_store.get_blob(
        blob_store.download_key(row["filename"]),
        row.get("mime_type") or "application/octet-stream",
    )

    record_download(item_id)

    return Response(
        content=blob.body,
        media_type=row.get("mime_type") or blob.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="{row["filename"]}"',
            "Content-Length": str(blob.length),
        },
    )
