# ============================================
# CENTRALIZED ROLE → CAPABILITY MAP
# ============================================
#
# Structural eligibility only. A role missing an action here is a hard
# deny; a role holding it still goes through instance-level checks in
# core.access.decide().

from typing import FrozenSet, Union

from models.enums import Action, Role


ROLE_PERMISSIONS = {

    # =====================================================
    # CUSTOMER: owns objects, sees only its own
    # =====================================================
    Role.customer: frozenset({
        Action.create_object,
        Action.view_object,
        Action.update_object, Action.delete_object,
        Action.view_photo, Action.view_video, Action.view_bim_model,
        Action.upload_media,
        Action.move_media, Action.manage_folders,
        Action.create_comment,
        Action.delete_comment, Action.edit_comment_visibility,
        Action.view_downloads, Action.download_item,
        Action.view_portfolio, Action.manage_portfolio,
        Action.view_users,
    }),

    # =====================================================
    # DESIGNER: assigned objects, curates visibility,
    # manages the download catalog and BIM trees
    # =====================================================
    Role.designer: frozenset({
        Action.view_object,
        Action.update_object,
        Action.view_photo, Action.view_video, Action.view_bim_model,
        Action.upload_media,
        Action.move_media, Action.manage_folders,
        Action.toggle_resource_visibility,
        Action.create_comment,
        Action.delete_comment, Action.edit_comment_visibility,
        Action.view_downloads, Action.download_item,
        Action.manage_downloads,
        Action.generate_bim_tree,
        Action.view_portfolio, Action.manage_portfolio,
        Action.create_portfolio_project, Action.upload_portfolio_image,
        Action.view_users,
    }),

    # =====================================================
    # BUILDER: assigned objects, uploads site media
    # =====================================================
    Role.builder: frozenset({
        Action.view_object,
        Action.view_photo, Action.view_video, Action.view_bim_model,
        Action.upload_media,
        Action.move_media, Action.manage_folders,
        Action.create_comment,
        Action.delete_comment, Action.edit_comment_visibility,
        Action.view_downloads, Action.download_item,
        Action.view_portfolio, Action.manage_portfolio,
        Action.create_portfolio_project, Action.upload_portfolio_image,
        Action.view_users,
    }),

    # =====================================================
    # ADMIN: everything
    # =====================================================
    Role.admin: frozenset(Action),
}


# Actions whose instance check is authorship rather than object scope
AUTHOR_RESTRICTED_ACTIONS = frozenset({
    Action.delete_comment,
    Action.edit_comment_visibility,
})

# Read actions where a CUSTOMER additionally needs is_visible_to_customer
CUSTOMER_VISIBILITY_GATED_ACTIONS = frozenset({
    Action.view_photo,
    Action.view_video,
    Action.view_bim_model,
})


def get_capabilities(role: Union[Role, str, None]) -> FrozenSet[Action]:
    try:
        return ROLE_PERMISSIONS.get(Role(role), frozenset())
    except ValueError:
        # Unknown role → empty set
        return frozenset()


def structurally_permitted(role: Union[Role, str, None], action: Union[Action, str]) -> bool:
    """Coarse role → action matrix, independent of the resource instance."""
    try:
        action = Action(action)
    except ValueError:
        return False
    return action in get_capabilities(role)
