# core/visibility.py

"""
Visibility Toggle Manager.

Flips `is_visible_to_customer` on photos, videos, BIM models and
comments. Media go through the assignment path
(toggle_resource_visibility); comments go through the author path
(edit_comment_visibility). Writes are last-write-wins.
"""

from core import store
from core.access import require_access
from core.errors import NotFoundError
from core.logging_config import logger
from models.access import Principal, ResourceContext
from models.enums import Action, ResourceKind


VISIBILITY_TABLES = {
    ResourceKind.photo: store.PHOTOS,
    ResourceKind.video: store.VIDEOS,
    ResourceKind.bim_model: store.BIM_MODELS,
    ResourceKind.photo_comment: store.PHOTO_COMMENTS,
    ResourceKind.model_comment: store.MODEL_COMMENTS,
}

COMMENT_KINDS = frozenset({ResourceKind.photo_comment, ResourceKind.model_comment})


def visibility_action(resource: ResourceContext) -> Action:
    if resource.kind in COMMENT_KINDS:
        return Action.edit_comment_visibility
    return Action.toggle_resource_visibility


def set_visibility(principal: Principal, resource: ResourceContext, visible: bool) -> dict:
    table = VISIBILITY_TABLES.get(resource.kind)
    if table is None:
        raise ValueError(f"{resource.kind} has no customer-visibility flag")

    require_access(principal, visibility_action(resource), resource)

    updated = store.update_row(table, resource.id, {"is_visible_to_customer": visible})
    if updated is None:
        # Row vanished between the read and the write
        raise NotFoundError("Resource")

    logger.info(
        f"Visibility set: {resource.kind}:{resource.id} "
        f"is_visible_to_customer={visible} by user={principal.id}"
    )
    return updated
