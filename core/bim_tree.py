# core/bim_tree.py

"""
Client for the external IFC → parameter-tree transform.
"""

import json
from typing import Any, Dict

import requests

from core import blob_store
from core.config import settings
from core.errors import NotFoundError
from core.logging_config import logger


class TreeServiceUnavailable(Exception):
    pass


def generate_parameter_tree(model_key: str) -> Dict[str, Any]:
    """
    POST the model's blob key to the transform service and return the
    tree it produces.
    """
    if not settings.BIM_TREE_SERVICE_URL:
        raise TreeServiceUnavailable("BIM tree service is not configured")

    try:
        resp = requests.post(
            settings.BIM_TREE_SERVICE_URL,
            json={"file_key": model_key},
            timeout=settings.BIM_TREE_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"BIM tree generation failed for {model_key}: {e}")
        raise TreeServiceUnavailable(str(e)) from e

    tree = payload.get("tree", payload) if isinstance(payload, dict) else None
    if not isinstance(tree, dict):
        raise TreeServiceUnavailable("Transform returned no tree")
    return tree


def save_tree(object_id: int, model_id: int, tree: Dict[str, Any]) -> str:
    key = blob_store.tree_key(object_id, model_id)
    blob_store.put_blob(
        key,
        json.dumps(tree, ensure_ascii=False, indent=2).encode("utf-8"),
        "application/json",
    )
    return key


def load_tree(object_id: int, model_id: int) -> Dict[str, Any]:
    try:
        blob = blob_store.get_blob(blob_store.tree_key(object_id, model_id), "application/json")
    except NotFoundError:
        raise NotFoundError("Parameter tree")
    return json.loads(blob.body.decode("utf-8"))
