# routers/auth.py

from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user
from core.permissions import get_capabilities
from models.access import Principal

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# -----------------------------------------------------
# GET /auth/me
# Role/status come from the users table on every call
# -----------------------------------------------------
@router.get("/me", summary="Current principal")
def me(current_user: Principal = Depends(get_current_user)):
    return {
        "user": current_user.model_dump(exclude={"auth_user_id"}),
        "capabilities": sorted(str(a) for a in get_capabilities(current_user.role)),
    }
