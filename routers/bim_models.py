# routers/bim_models.py

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from dependencies.auth import get_current_user
from core import bim_tree, blob_store, comments, media
from core.access import require_access
from core.logging_config import logger
from core.ownership import load_comment, load_media
from core.visibility import set_visibility
from models.access import Principal
from models.comment import CommentCreate, CommentList, CommentResponse
from models.enums import Action, ResourceKind
from models.media import BimModelList, BimModelResponse, ParameterTreeSave, VisibilityUpdate

router = APIRouter(
    prefix="/objects/{object_id}/models",
    tags=["BIM Models"],
)


def _model(object_id: int, model_id: int):
    # Model must belong to the object in the path
    return load_media(ResourceKind.bim_model, model_id, object_id)


# -----------------------------------------------------
# List / upload / metadata
# -----------------------------------------------------
@router.get("", response_model=BimModelList, summary="List BIM models of an object")
def list_models(object_id: int, current_user: Principal = Depends(get_current_user)):
    result = media.list_object_media(current_user, ResourceKind.bim_model, object_id)
    return {"models": result["items"]}


@router.post("", status_code=201, response_model=BimModelResponse, summary="Upload a BIM model")
async def upload_model(
    object_id: int,
    file: UploadFile = File(...),
    current_user: Principal = Depends(get_current_user),
):
    row = await media.upload_media(current_user, ResourceKind.bim_model, object_id, file)
    return {"model": row}


@router.get("/{model_id}", response_model=BimModelResponse, summary="BIM model metadata")
def get_model(object_id: int, model_id: int, current_user: Principal = Depends(get_current_user)):
    model = require_access(current_user, Action.view_bim_model, _model(object_id, model_id))
    return {"model": model.row}


# -----------------------------------------------------
# Bytes
# -----------------------------------------------------
@router.get("/{model_id}/download", summary="Download the model file")
def download_model(object_id: int, model_id: int, current_user: Principal = Depends(get_current_user)):
    model = require_access(current_user, Action.view_bim_model, _model(object_id, model_id))
    return media.media_response(ResourceKind.bim_model, model.row, disposition="attachment")


@router.get("/{model_id}/view", summary="Stream the model file for the viewer")
def view_model(object_id: int, model_id: int, current_user: Principal = Depends(get_current_user)):
    model = require_access(current_user, Action.view_bim_model, _model(object_id, model_id))
    return media.media_response(ResourceKind.bim_model, model.row, disposition="inline")


# -----------------------------------------------------
# Visibility
# -----------------------------------------------------
@router.put("/{model_id}/visibility", response_model=BimModelResponse, summary="Show or hide a model for the customer")
def update_model_visibility(
    object_id: int,
    model_id: int,
    payload: VisibilityUpdate,
    current_user: Principal = Depends(get_current_user),
):
    model = _model(object_id, model_id)
    return {"model": set_visibility(current_user, model, payload.is_visible_to_customer)}


# -----------------------------------------------------
# Parameter tree
# -----------------------------------------------------
@router.get("/{model_id}/tree", summary="Stored parameter tree")
def get_tree(object_id: int, model_id: int, current_user: Principal = Depends(get_current_user)):
    require_access(current_user, Action.view_bim_model, _model(object_id, model_id))
    return {"tree": bim_tree.load_tree(object_id, model_id)}


@router.post("/{model_id}/tree/generate", summary="Generate the parameter tree from the IFC file")
def generate_tree(object_id: int, model_id: int, current_user: Principal = Depends(get_current_user)):
    model = require_access(current_user, Action.generate_bim_tree, _model(object_id, model_id))

    model_key = blob_store.media_key(object_id, media.BLOB_FOLDERS[ResourceKind.bim_model], model.row["filename"])
    try:
        tree = bim_tree.generate_parameter_tree(model_key)
    except bim_tree.TreeServiceUnavailable as e:
        raise HTTPException(502, f"Parameter tree generation failed: {e}")

    bim_tree.save_tree(object_id, model_id, tree)
    logger.info(f"Parameter tree generated for model {model_id} by user {current_user.id}")
    return {"success": True, "tree": tree}


@router.post("/{model_id}/tree/save", summary="Save an edited parameter tree")
def save_tree(
    object_id: int,
    model_id: int,
    payload: ParameterTreeSave,
    current_user: Principal = Depends(get_current_user),
):
    require_access(current_user, Action.generate_bim_tree, _model(object_id, model_id))

    if not payload.tree:
        raise HTTPException(400, "Parameter tree was not provided")

    bim_tree.save_tree(object_id, model_id, payload.tree)
    return {"success": True, "message": "Parameter tree saved"}


# -----------------------------------------------------
# Comments
# -----------------------------------------------------
@router.get("/{model_id}/comments", response_model=CommentList, summary="List comments on a model")
def list_model_comments(object_id: int, model_id: int, current_user: Principal = Depends(get_current_user)):
    model = _model(object_id, model_id)
    return {"comments": comments.list_comments(current_user, ResourceKind.model_comment, model)}


@router.post("/{model_id}/comments", status_code=201, response_model=CommentResponse, summary="Comment on a model")
def create_model_comment(
    object_id: int,
    model_id: int,
    payload: CommentCreate,
    current_user: Principal = Depends(get_current_user),
):
    model = _model(object_id, model_id)
    row = comments.create_comment(current_user, ResourceKind.model_comment, model, payload.text)
    return {"comment": row}


@router.delete("/{model_id}/comments/{comment_id}", summary="Delete a model comment (author or admin)")
def delete_model_comment(
    object_id: int,
    model_id: int,
    comment_id: int,
    current_user: Principal = Depends(get_current_user),
):
    comment = load_comment(ResourceKind.model_comment, comment_id, model_id, object_id)
    comments.delete_comment(current_user, comment)
    return {"success": True}


@router.put(
    "/{model_id}/comments/{comment_id}/visibility",
    response_model=CommentResponse,
    summary="Show or hide a model comment (author or admin)",
)
def update_model_comment_visibility(
    object_id: int,
    model_id: int,
    comment_id: int,
    payload: VisibilityUpdate,
    current_user: Principal = Depends(get_current_user),
):
    comment = load_comment(ResourceKind.model_comment, comment_id, model_id, object_id)
    return {"comment": set_visibility(current_user, comment, payload.is_visible_to_customer)}
