# models/access.py

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from models.enums import DenyReason, ResourceKind


# -------------------------------------------------------------------
# Principal (authenticated actor; role/status read fresh from `users`)
# -------------------------------------------------------------------
class Principal(BaseModel):
    id: int
    auth_user_id: Optional[str] = None
    email: str
    name: Optional[str] = None
    role: str
    status: str


# -------------------------------------------------------------------
# Ownership chain
# -------------------------------------------------------------------
class OwnerChain(BaseModel):
    """
    Path from a resource up to its owning object and that object's
    customer. Catalog items have an empty chain; portfolios are
    user-owned (owner_user_id) rather than object-scoped.
    """
    object_id: Optional[int] = None
    object_owner_user_id: Optional[int] = None
    owner_user_id: Optional[int] = None

    @property
    def is_object_scoped(self) -> bool:
        return self.object_id is not None

    @property
    def is_user_owned(self) -> bool:
        return self.owner_user_id is not None

    @property
    def is_empty(self) -> bool:
        return not self.is_object_scoped and not self.is_user_owned


# -------------------------------------------------------------------
# Resource instance as seen by the decision engine
# -------------------------------------------------------------------
class ResourceContext(BaseModel):
    kind: ResourceKind
    id: Optional[int] = None
    chain: OwnerChain = Field(default_factory=OwnerChain)
    author_user_id: Optional[int] = None
    is_visible_to_customer: Optional[bool] = None
    is_public: Optional[bool] = None

    # Raw store row, returned to callers after Allow
    row: Dict[str, Any] = Field(default_factory=dict)


# -------------------------------------------------------------------
# Decision
# -------------------------------------------------------------------
class Decision(BaseModel):
    allowed: bool
    reason: Optional[DenyReason] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed
