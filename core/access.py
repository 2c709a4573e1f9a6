# core/access.py

"""
Access Decision Engine.

One decision function for every entry point:

    decide(principal, action, resource) -> Decision

Rules, in order, first match wins:
  1. role not structurally permitted        → Deny(role_not_permitted)
  2. ADMIN                                  → Allow
  3. author-restricted action, not author   → Deny(not_author)
  4. ownership chain:
       object-scoped:  CUSTOMER must own the object       (not_owner)
                       DESIGNER/BUILDER must be assigned  (not_assigned)
       user-owned:     owner (or public, for view)        (not_owner)
       unscoped:       catalog / create actions
  5. CUSTOMER reading photo/video/BIM model needs
     is_visible_to_customer                 → Deny(not_visible_to_customer)
  6. anything else                          → Deny(no_matching_rule)

Store failures (StoreUnavailable) propagate; they are never a Deny.
"""

from typing import Optional

from core import store
from core.errors import AccessDenied
from core.logging_config import logger
from core.ownership import owner_chain
from core.permissions import (
    AUTHOR_RESTRICTED_ACTIONS,
    CUSTOMER_VISIBILITY_GATED_ACTIONS,
    structurally_permitted,
)
from models.access import Decision, OwnerChain, Principal, ResourceContext
from models.enums import Action, DenyReason, ResourceKind, Role


ASSIGNABLE_ROLES = (Role.designer, Role.builder)

VISIBILITY_FLAGGED_KINDS = frozenset({
    ResourceKind.photo,
    ResourceKind.video,
    ResourceKind.bim_model,
})

# Actions that need no instance scope beyond the structural check
UNSCOPED_ACTIONS = {
    ResourceKind.object: frozenset({Action.create_object}),
    ResourceKind.downloadable_item: frozenset({
        Action.view_downloads,
        Action.download_item,
        Action.manage_downloads,
    }),
    ResourceKind.user: frozenset({Action.view_users}),
}

DENY_MESSAGES = {
    DenyReason.role_not_permitted: "Your role does not allow this action",
    DenyReason.not_author: "Only the author can change this comment",
    DenyReason.not_owner: "You do not own this resource",
    DenyReason.not_assigned: "You are not assigned to this object",
    DenyReason.not_visible_to_customer: "This resource is not available",
    DenyReason.not_purchased: "This download has not been paid for",
    DenyReason.no_matching_rule: "Access denied",
}


# -----------------------------------------------------
# Step 4: instance scope
# -----------------------------------------------------
def _object_scope(principal: Principal, chain: OwnerChain) -> Optional[Decision]:
    if principal.role == Role.customer:
        if chain.object_owner_user_id == principal.id:
            return Decision.allow()
        return Decision.deny(DenyReason.not_owner)

    if principal.role in ASSIGNABLE_ROLES:
        if store.is_assigned(principal.id, chain.object_id):
            return Decision.allow()
        return Decision.deny(DenyReason.not_assigned)

    return None


def _user_scope(principal: Principal, action: Action, resource: ResourceContext) -> Decision:
    if action == Action.view_portfolio and resource.is_public:
        return Decision.allow()
    if resource.chain.owner_user_id == principal.id:
        return Decision.allow()
    return Decision.deny(DenyReason.not_owner)


def _instance_scope(principal: Principal, action: Action, resource: ResourceContext) -> Optional[Decision]:
    chain = owner_chain(resource)

    if chain.is_object_scoped:
        return _object_scope(principal, chain)

    if chain.is_user_owned:
        return _user_scope(principal, action, resource)

    if action in UNSCOPED_ACTIONS.get(resource.kind, ()):
        return Decision.allow()

    return None


# -----------------------------------------------------
# decide()
# -----------------------------------------------------
def _evaluate(principal: Principal, action: Action, resource: ResourceContext) -> Decision:
    # 1. Structural capability
    if not structurally_permitted(principal.role, action):
        return Decision.deny(DenyReason.role_not_permitted)

    # 2. Admin bypass
    if principal.role == Role.admin:
        return Decision.allow()

    # 3. Authorship
    if action in AUTHOR_RESTRICTED_ACTIONS and resource.author_user_id != principal.id:
        return Decision.deny(DenyReason.not_author)

    # 4. Ownership / assignment
    scoped = _instance_scope(principal, action, resource)
    if scoped is None:
        # 6. Fail closed
        return Decision.deny(DenyReason.no_matching_rule)
    if not scoped.allowed:
        return scoped

    # 5. Customer visibility gate
    if (
        principal.role == Role.customer
        and action in CUSTOMER_VISIBILITY_GATED_ACTIONS
        and resource.kind in VISIBILITY_FLAGGED_KINDS
        and resource.is_visible_to_customer is not True
    ):
        return Decision.deny(DenyReason.not_visible_to_customer)

    return scoped


def decide(principal: Principal, action, resource: ResourceContext) -> Decision:
    try:
        action = Action(action)
    except ValueError:
        logger.warning(f"Unknown action requested: {action!r}")
        return Decision.deny(DenyReason.no_matching_rule)

    decision = _evaluate(principal, action, resource)

    if not decision.allowed:
        logger.info(
            f"Access denied: user={principal.id} role={principal.role} "
            f"action={action} resource={resource.kind}:{resource.id} "
            f"reason={decision.reason}"
        )

    return decision


# -----------------------------------------------------
# Route helper
# -----------------------------------------------------
def require_access(principal: Principal, action, resource: ResourceContext) -> ResourceContext:
    """
    decide() and raise AccessDenied on Deny. Returns the resource so
    routes can chain load → check → use.
    """
    decision = decide(principal, action, resource)
    if not decision.allowed:
        raise AccessDenied(decision.reason, DENY_MESSAGES.get(decision.reason))
    return resource


def can_delete_any_comment(principal: Principal) -> bool:
    return structurally_permitted(principal.role, Action.delete_any_comment)
