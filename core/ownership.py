# core/ownership.py

"""
Resource Ownership Resolver.

Loads a resource instance fresh from the store and resolves its
ownership chain (object → owning customer, or portfolio → owning user).
Any break in the chain, or a route parameter naming a different parent
than the one stored, is reported as NotFoundError.
"""

from typing import Optional, Tuple

from core import store
from core.errors import NotFoundError
from models.access import OwnerChain, ResourceContext
from models.enums import ResourceKind


MEDIA_TABLES = {
    ResourceKind.photo: store.PHOTOS,
    ResourceKind.video: store.VIDEOS,
    ResourceKind.bim_model: store.BIM_MODELS,
}

MEDIA_LABELS = {
    ResourceKind.photo: "Photo",
    ResourceKind.video: "Video",
    ResourceKind.bim_model: "BIM model",
}

# comment kind → (table, parent column, parent kind)
COMMENT_TABLES = {
    ResourceKind.photo_comment: (store.PHOTO_COMMENTS, "photo_id", ResourceKind.photo),
    ResourceKind.model_comment: (store.MODEL_COMMENTS, "model_id", ResourceKind.bim_model),
}


def owner_chain(resource: ResourceContext) -> OwnerChain:
    return resource.chain


# -----------------------------------------------------
# Objects
# -----------------------------------------------------
def _object_chain(object_id: int) -> Tuple[OwnerChain, dict]:
    obj = store.get_object(object_id)
    if not obj:
        raise NotFoundError("Object")
    chain = OwnerChain(object_id=obj["id"], object_owner_user_id=obj["owner_user_id"])
    return chain, obj


def object_context(obj: dict) -> ResourceContext:
    """Context for an object row the caller already holds."""
    chain = OwnerChain(object_id=obj["id"], object_owner_user_id=obj["owner_user_id"])
    return ResourceContext(kind=ResourceKind.object, id=obj["id"], chain=chain, row=obj)


def load_object(object_id: int) -> ResourceContext:
    _, obj = _object_chain(object_id)
    return object_context(obj)


# -----------------------------------------------------
# Photos / videos / BIM models
# -----------------------------------------------------
def _media_context(kind: ResourceKind, row: dict, object_id: Optional[int]) -> ResourceContext:
    if object_id is not None and row.get("object_id") != object_id:
        raise NotFoundError(MEDIA_LABELS[kind])

    try:
        chain, _ = _object_chain(row["object_id"])
    except NotFoundError:
        # Orphaned media: the chain does not resolve
        raise NotFoundError(MEDIA_LABELS[kind])

    return ResourceContext(
        kind=kind,
        id=row["id"],
        chain=chain,
        is_visible_to_customer=row.get("is_visible_to_customer", True),
        row=row,
    )


def load_media(kind: ResourceKind, media_id: int, object_id: Optional[int] = None) -> ResourceContext:
    """
    `object_id` is the object named by the route, if any; a mismatch
    with the stored object is a 404.
    """
    row = store.fetch_one(MEDIA_TABLES[kind], id=media_id)
    if not row:
        raise NotFoundError(MEDIA_LABELS[kind])
    return _media_context(kind, row, object_id)


def load_media_by_filename(kind: ResourceKind, object_id: int, filename: str) -> ResourceContext:
    row = store.find_media_by_filename(MEDIA_TABLES[kind], object_id, filename)
    if not row:
        raise NotFoundError(MEDIA_LABELS[kind])
    return _media_context(kind, row, object_id)


# -----------------------------------------------------
# Comments (chain follows the parent photo / model)
# -----------------------------------------------------
def load_comment(
    kind: ResourceKind,
    comment_id: int,
    parent_id: int,
    object_id: Optional[int] = None,
) -> ResourceContext:
    table, parent_column, parent_kind = COMMENT_TABLES[kind]

    row = store.fetch_one(table, id=comment_id)
    if not row or row.get(parent_column) != parent_id:
        raise NotFoundError("Comment")

    parent = load_media(parent_kind, parent_id, object_id)

    return ResourceContext(
        kind=kind,
        id=row["id"],
        chain=parent.chain,
        author_user_id=row.get("author_user_id"),
        is_visible_to_customer=row.get("is_visible_to_customer", True),
        row=row,
    )


# -----------------------------------------------------
# Folders
# -----------------------------------------------------
def load_folder(folder_id: int, object_id: int) -> ResourceContext:
    row = store.fetch_one(store.FOLDERS, id=folder_id)
    if not row or row.get("object_id") != object_id:
        raise NotFoundError("Folder")

    chain, _ = _object_chain(object_id)
    return ResourceContext(kind=ResourceKind.folder, id=row["id"], chain=chain, row=row)


# -----------------------------------------------------
# Catalog items (global, no object scope)
# -----------------------------------------------------
def load_downloadable_item(item_id: int) -> ResourceContext:
    row = store.fetch_one(store.DOWNLOADABLE_ITEMS, id=item_id)
    if not row:
        raise NotFoundError("Download")
    return ResourceContext(kind=ResourceKind.downloadable_item, id=row["id"], row=row)


def catalog_context() -> ResourceContext:
    """The catalog as a whole (listing, new uploads)."""
    return ResourceContext(kind=ResourceKind.downloadable_item)


# -----------------------------------------------------
# Portfolios (user-owned)
# -----------------------------------------------------
def load_portfolio_for_user(user_id: int) -> Optional[ResourceContext]:
    row = store.fetch_one(store.PORTFOLIOS, user_id=user_id)
    if not row:
        return None
    return ResourceContext(
        kind=ResourceKind.portfolio,
        id=row["id"],
        chain=OwnerChain(owner_user_id=row["user_id"]),
        is_public=row.get("is_public", False),
        row=row,
    )


def own_portfolio_context(user_id: int) -> ResourceContext:
    existing = load_portfolio_for_user(user_id)
    if existing:
        return existing
    return ResourceContext(kind=ResourceKind.portfolio, chain=OwnerChain(owner_user_id=user_id))


def load_portfolio_project(project_id: int) -> ResourceContext:
    row = store.fetch_one(store.PORTFOLIO_PROJECTS, id=project_id)
    if not row:
        raise NotFoundError("Portfolio project")

    portfolio = store.fetch_one(store.PORTFOLIOS, id=row["portfolio_id"])
    if not portfolio:
        raise NotFoundError("Portfolio project")

    return ResourceContext(
        kind=ResourceKind.portfolio_project,
        id=row["id"],
        chain=OwnerChain(owner_user_id=portfolio["user_id"]),
        row=row,
    )


# -----------------------------------------------------
# User directory (no owner; role-scoped listings)
# -----------------------------------------------------
def user_directory_context() -> ResourceContext:
    return ResourceContext(kind=ResourceKind.user)
