# core/comments.py

"""
Comments on photos and BIM models.

Reading or posting needs read access to the parent (so a customer
cannot reach comments of a hidden photo). Deleting and changing
visibility are author-only, with the admin bypass.
"""

from datetime import datetime, timezone

from fastapi import HTTPException

from core import store
from core.access import can_delete_any_comment, require_access
from core.logging_config import logger
from core.media import READ_ACTIONS
from core.ownership import COMMENT_TABLES
from models.access import Principal, ResourceContext
from models.enums import Action, ResourceKind, Role


def _with_flags(principal: Principal, row: dict) -> dict:
    return {
        **row,
        "can_delete": row.get("author_user_id") == principal.id or can_delete_any_comment(principal),
    }


def list_comments(principal: Principal, kind: ResourceKind, parent: ResourceContext) -> list:
    table, parent_column, _ = COMMENT_TABLES[kind]
    require_access(principal, READ_ACTIONS[parent.kind], parent)

    filters = {parent_column: parent.id}
    if principal.role == Role.customer:
        filters["is_visible_to_customer"] = True

    rows = store.fetch_many(table, filters=filters, order_by="created_at")
    return [_with_flags(principal, row) for row in rows]


def create_comment(principal: Principal, kind: ResourceKind, parent: ResourceContext, text: str) -> dict:
    table, parent_column, _ = COMMENT_TABLES[kind]
    require_access(principal, READ_ACTIONS[parent.kind], parent)
    require_access(principal, Action.create_comment, parent)

    if not text:
        raise HTTPException(400, "Comment text is required")

    row = store.insert_row(table, {
        parent_column: parent.id,
        "author_user_id": principal.id,
        "text": text,
        "is_visible_to_customer": True,
        "is_admin_comment": principal.role == Role.admin,
        "created_at": datetime.now(timezone.utc).isoformat(),
    })
    return _with_flags(principal, row)


def delete_comment(principal: Principal, comment: ResourceContext) -> None:
    table, _, _ = COMMENT_TABLES[comment.kind]
    require_access(principal, Action.delete_comment, comment)

    store.delete_rows(table, id=comment.id)
    logger.info(f"{comment.kind} {comment.id} deleted by user {principal.id}")
