# routers/portfolio.py

import re
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from dependencies.auth import get_current_user
from core import blob_store, store
from core.access import require_access
from core.config import settings
from core.errors import NotFoundError
from core.logging_config import logger
from core.ownership import load_portfolio_for_user, load_portfolio_project, own_portfolio_context
from models.access import Principal
from models.enums import Action
from models.portfolio import PortfolioProjectCreate, PortfolioProjectUpdate, PortfolioUpdate

router = APIRouter(
    prefix="/portfolio",
    tags=["Portfolio"],
)

# upload type → blob folder
IMAGE_FOLDERS = {
    "avatar": "avatars",
    "cover": "covers",
}

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"}

# "<owner user id>-<timestamp>.<ext>"
IMAGE_NAME = re.compile(r"^(\d+)-\d+\.[A-Za-z0-9]+$")


def _clean(payload) -> dict:
    return {k: v for k, v in payload.model_dump().items() if v is not None}


def _ensure_portfolio(current_user: Principal) -> dict:
    portfolio = load_portfolio_for_user(current_user.id)
    if portfolio:
        return portfolio.row

    row = store.insert_row(store.PORTFOLIOS, {
        "user_id": current_user.id,
        "title": current_user.name or "My portfolio",
        "is_public": False,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    })
    logger.info(f"Portfolio created for user {current_user.id}")
    return row


# -----------------------------------------------------
# PUT /portfolio
# Create or update the caller's own portfolio
# -----------------------------------------------------
@router.put("", summary="Create or update my portfolio")
def upsert_portfolio(payload: PortfolioUpdate, current_user: Principal = Depends(get_current_user)):
    portfolio = require_access(current_user, Action.manage_portfolio, own_portfolio_context(current_user.id))

    changes = _clean(payload)
    changes["updated_at"] = datetime.now(timezone.utc).isoformat()

    if portfolio.id is not None:
        row = store.update_row(store.PORTFOLIOS, portfolio.id, changes)
        if not row:
            raise NotFoundError("Portfolio")
    else:
        row = store.insert_row(store.PORTFOLIOS, {
            "user_id": current_user.id,
            "is_public": False,
            **changes,
        })
        logger.info(f"Portfolio created for user {current_user.id}")

    return {"portfolio": row}


# -----------------------------------------------------
# Projects
# -----------------------------------------------------
@router.get("/projects", summary="List my portfolio projects (drafts included)")
def list_my_projects(current_user: Principal = Depends(get_current_user)):
    portfolio = require_access(current_user, Action.view_portfolio, own_portfolio_context(current_user.id))
    if portfolio.id is None:
        return {"projects": []}

    projects = store.fetch_many(
        store.PORTFOLIO_PROJECTS,
        filters={"portfolio_id": portfolio.id},
        order_by="order_index",
    )
    return {"projects": projects}


@router.post("/projects", status_code=201, summary="Add a project to my portfolio (designer, builder)")
def create_project(payload: PortfolioProjectCreate, current_user: Principal = Depends(get_current_user)):
    require_access(current_user, Action.create_portfolio_project, own_portfolio_context(current_user.id))

    portfolio = _ensure_portfolio(current_user)

    order_index = payload.order_index
    if order_index is None:
        existing = store.fetch_many(store.PORTFOLIO_PROJECTS, filters={"portfolio_id": portfolio["id"]})
        order_index = max((p.get("order_index") or 0 for p in existing), default=-1) + 1

    row = store.insert_row(store.PORTFOLIO_PROJECTS, {
        **_clean(payload),
        "portfolio_id": portfolio["id"],
        "order_index": order_index,
    })

    logger.info(f"Portfolio project {row.get('id')} created by user {current_user.id}")
    return {"project": row}


@router.put("/projects/{project_id}", summary="Update a portfolio project")
def update_project(
    project_id: int,
    payload: PortfolioProjectUpdate,
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.manage_portfolio, load_portfolio_project(project_id))

    changes = _clean(payload)
    if not changes:
        raise HTTPException(400, "No fields to update")

    row = store.update_row(store.PORTFOLIO_PROJECTS, project_id, changes)
    if not row:
        raise NotFoundError("Portfolio project")
    return {"project": row}


@router.delete("/projects/{project_id}", summary="Delete a portfolio project")
def delete_project(project_id: int, current_user: Principal = Depends(get_current_user)):
    require_access(current_user, Action.manage_portfolio, load_portfolio_project(project_id))

    store.delete_rows(store.PORTFOLIO_PROJECTS, id=project_id)
    logger.info(f"Portfolio project {project_id} deleted by user {current_user.id}")
    return {"success": True}


# -----------------------------------------------------
# Images (avatar / cover)
# -----------------------------------------------------
@router.post("/upload", status_code=201, summary="Upload an avatar or cover image (designer, builder)")
async def upload_image(
    file: UploadFile = File(...),
    type: str = Form(..., description="'avatar' or 'cover'"),
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.upload_portfolio_image, own_portfolio_context(current_user.id))

    folder = IMAGE_FOLDERS.get(type)
    if folder is None:
        raise HTTPException(400, "type must be 'avatar' or 'cover'")
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(400, "Unsupported image type. Allowed: JPEG, PNG, WebP, GIF")

    content = await file.read()
    if len(content) > settings.PORTFOLIO_IMAGE_MAX_BYTES:
        raise HTTPException(400, "Image is too large")

    name = file.filename or ""
    extension = name.rsplit(".", 1)[-1].lower() if "." in name else "jpg"
    if not re.fullmatch(r"[a-z0-9]+", extension):
        extension = "jpg"
    stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    filename = f"{current_user.id}-{stamp}.{extension}"

    blob_store.put_blob(blob_store.portfolio_image_key(folder, filename), content, file.content_type)

    logger.info(f"Portfolio {type} uploaded by user {current_user.id}")
    return {
        "success": True,
        "url": f"/portfolio/images/{folder}/{filename}",
        "filename": filename,
        "original_name": file.filename,
        "file_size": len(content),
        "mime_type": file.content_type,
    }


@router.get("/images/{folder}/{filename}", summary="Stream a portfolio image")
def get_image(folder: str, filename: str, current_user: Principal = Depends(get_current_user)):
    match = IMAGE_NAME.match(filename)
    if folder not in IMAGE_FOLDERS.values() or not match:
        raise NotFoundError("Image")

    # Visible wherever the owner's portfolio is
    owner_id = int(match.group(1))
    require_access(current_user, Action.view_portfolio, own_portfolio_context(owner_id))

    blob = blob_store.get_blob(blob_store.portfolio_image_key(folder, filename), "image/jpeg")
    return Response(
        content=blob.body,
        media_type=blob.content_type,
        headers={
            "Content-Length": str(blob.length),
            "Cache-Control": f"private, max-age={settings.FILE_CACHE_SECONDS}",
        },
    )


# -----------------------------------------------------
# GET /portfolio/{user_id}
# Owner sees everything; others see a public portfolio
# with published projects only.
# -----------------------------------------------------
@router.get("/{user_id}", summary="Get a user's portfolio")
def get_portfolio(user_id: int, current_user: Principal = Depends(get_current_user)):
    portfolio = load_portfolio_for_user(user_id)
    if portfolio is None:
        return {"portfolio": None, "projects": []}

    require_access(current_user, Action.view_portfolio, portfolio)

    filters = {"portfolio_id": portfolio.id}
    if portfolio.chain.owner_user_id != current_user.id:
        filters["is_published"] = True

    projects = store.fetch_many(store.PORTFOLIO_PROJECTS, filters=filters, order_by="order_index")
    return {"portfolio": portfolio.row, "projects": projects}
