# core/entitlements.py

"""
Purchase / entitlement gate for catalog downloads.

Evaluated at download time against the item's current price and the
caller's current purchase row; no historical snapshot is kept.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from core import store
from core.access import DENY_MESSAGES, require_access
from core.errors import AccessDenied, StoreUnavailable
from core.logging_config import logger
from models.access import Principal, ResourceContext
from models.enums import Action, DenyReason, PurchaseStatus


def _price(item: dict) -> Optional[Decimal]:
    raw = item.get("price")
    if raw is None:
        return None
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        price = None

    if price is None or not price.is_finite():
        # Unparseable or non-finite price is treated as paid, never as free
        logger.warning(f"Unparseable price on item {item.get('id')}: {raw!r}")
        return Decimal("1")
    return price


def is_free(item: dict) -> bool:
    price = _price(item)
    return price is None or price <= 0


def can_download(principal: Principal, item: dict) -> bool:
    if is_free(item):
        return True

    purchase = store.get_purchase(principal.id, item["id"])
    return bool(purchase) and purchase.get("status") == PurchaseStatus.paid


def require_download(principal: Principal, resource: ResourceContext) -> dict:
    """
    Structural/role check first, then the entitlement gate.
    """
    require_access(principal, Action.download_item, resource)

    if not can_download(principal, resource.row):
        logger.info(
            f"Download blocked: user={principal.id} item={resource.id} "
            f"reason={DenyReason.not_purchased}"
        )
        raise AccessDenied(
            DenyReason.not_purchased,
            DENY_MESSAGES[DenyReason.not_purchased],
        )

    return resource.row


def record_download(item_id: int) -> None:
    """
    Bump the download counter after bytes are served. A failed bump is
    logged and does not fail the download.
    """
    try:
        store.increment_download_count(item_id)
    except StoreUnavailable as e:
        logger.warning(f"Download counter not incremented for item {item_id}: {e}")


def annotate_item(item: dict, paid_item_ids: Iterable[int]) -> dict:
    free = is_free(item)
    purchased = item["id"] in set(paid_item_ids)
    return {
        **item,
        "is_free": free,
        "is_purchased": purchased,
        "can_download": free or purchased,
    }
