from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import AuthApiError

from core import store
from core.errors import StoreUnavailable, extract_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.access import Principal
from models.enums import Role, UserStatus


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# IDENTITY RESOLVER
#
# The bearer token is only an identity pointer. GoTrue tells us
# WHO the caller is; role and status always come from the live
# `users` row, never from token claims or user_metadata, so a
# demotion or suspension takes effect on the very next request.
# ============================================================
def resolve_principal(token: str) -> Optional[Principal]:
    client = get_supabase_client()
    if not client:
        raise StoreUnavailable("Supabase client", "not configured")

    # ---------------------------------------------------------
    # Validate token via Supabase GoTrue
    # ---------------------------------------------------------
    # Rejected tokens are unauthenticated; an unreachable GoTrue is a
    # storage failure and must not look like a bad token.
    try:
        auth_resp = client.auth.get_user(token)
    except AuthApiError as e:
        logger.info(f"Token rejected by GoTrue: {extract_supabase_error(e)}")
        return None
    except Exception as e:
        raise StoreUnavailable("Validate token", extract_supabase_error(e))

    auth_user = getattr(auth_resp, "user", None)
    if not auth_user:
        return None

    # ---------------------------------------------------------
    # Re-read role/status from storage
    # ---------------------------------------------------------
    row = store.get_user_by_auth_id(auth_user.id)
    if not row:
        return None

    # Suspended and absent accounts look the same to the caller
    if row.get("status") != UserStatus.active:
        logger.info(f"Inactive user {row.get('id')} presented a valid token")
        return None

    role = row.get("role")
    if role not in Role.list():
        # Unknown role: capability table grants nothing
        logger.warning(f"User {row.get('id')} has unknown role {role!r}")

    return Principal(
        id=row["id"],
        auth_user_id=auth_user.id,
        email=row.get("email") or auth_user.email or "",
        name=row.get("name"),
        role=role or "",
        status=row["status"],
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials or not credentials.credentials:
        raise unauthorized

    principal = resolve_principal(credentials.credentials)
    if not principal:
        raise unauthorized

    return principal
