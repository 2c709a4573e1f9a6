from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# USER ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """System role. Authoritative only when freshly read from `users`."""

    customer = "CUSTOMER"
    designer = "DESIGNER"
    builder = "BUILDER"
    admin = "ADMIN"


# -----------------------------------------------------
# USER STATUS
# -----------------------------------------------------
class UserStatus(BaseStrEnum):
    active = "ACTIVE"
    inactive = "INACTIVE"
    blocked = "BLOCKED"


# -----------------------------------------------------
# RESOURCE KIND
# -----------------------------------------------------
class ResourceKind(BaseStrEnum):
    """Every resource type the decision engine knows how to scope."""

    object = "object"
    photo = "photo"
    video = "video"
    bim_model = "bim_model"
    photo_comment = "photo_comment"
    model_comment = "model_comment"
    folder = "folder"
    downloadable_item = "downloadable_item"
    portfolio = "portfolio"
    portfolio_project = "portfolio_project"
    user = "user"


# -----------------------------------------------------
# ACTION
# -----------------------------------------------------
class Action(BaseStrEnum):
    create_object = "create_object"
    view_object = "view_object"
    update_object = "update_object"
    delete_object = "delete_object"
    view_photo = "view_photo"
    view_video = "view_video"
    view_bim_model = "view_bim_model"
    upload_media = "upload_media"
    move_media = "move_media"
    manage_folders = "manage_folders"
    toggle_resource_visibility = "toggle_resource_visibility"
    create_comment = "create_comment"
    delete_comment = "delete_comment"
    edit_comment_visibility = "edit_comment_visibility"
    delete_any_comment = "delete_any_comment"
    view_downloads = "view_downloads"
    download_item = "download_item"
    manage_downloads = "manage_downloads"
    generate_bim_tree = "generate_bim_tree"
    manage_assignments = "manage_assignments"
    view_portfolio = "view_portfolio"
    manage_portfolio = "manage_portfolio"
    create_portfolio_project = "create_portfolio_project"
    upload_portfolio_image = "upload_portfolio_image"
    view_users = "view_users"


# -----------------------------------------------------
# DENIAL REASON
# -----------------------------------------------------
class DenyReason(BaseStrEnum):
    role_not_permitted = "role_not_permitted"
    not_author = "not_author"
    not_owner = "not_owner"
    not_assigned = "not_assigned"
    not_visible_to_customer = "not_visible_to_customer"
    not_purchased = "not_purchased"
    no_matching_rule = "no_matching_rule"


# -----------------------------------------------------
# PURCHASE STATUS
# -----------------------------------------------------
class PurchaseStatus(BaseStrEnum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


# -----------------------------------------------------
# CATALOG ITEM STATUS
# -----------------------------------------------------
class ItemStatus(BaseStrEnum):
    active = "ACTIVE"
    archived = "ARCHIVED"
