# -------------------------
# Enums
# -------------------------
from .enums import (
    Action,
    DenyReason,
    ItemStatus,
    PurchaseStatus,
    ResourceKind,
    Role,
    UserStatus,
)

# -------------------------
# Access decision types
# -------------------------
from .access import (
    Decision,
    OwnerChain,
    Principal,
    ResourceContext,
)

# -------------------------
# Object Models
# -------------------------
from .site_object import (
    AssignmentCreate,
    AssignmentRead,
    SiteObjectBase,
    SiteObjectCreate,
    SiteObjectRead,
)

# -------------------------
# Media / Folder Models
# -------------------------
from .media import (
    FolderCreate,
    FolderRead,
    FolderUpdate,
    MediaRead,
    MoveToFolder,
    ParameterTreeSave,
    VisibilityUpdate,
)

# -------------------------
# Comments
# -------------------------
from .comment import CommentCreate, CommentRead

# -------------------------
# Downloads
# -------------------------
from .download import DownloadableItemRead, PurchaseRead

# -------------------------
# Portfolio
# -------------------------
from .portfolio import PortfolioProjectCreate, PortfolioProjectUpdate, PortfolioUpdate

__all__ = [
    # enums
    "Action",
    "DenyReason",
    "ItemStatus",
    "PurchaseStatus",
    "ResourceKind",
    "Role",
    "UserStatus",

    # access
    "Decision",
    "OwnerChain",
    "Principal",
    "ResourceContext",

    # objects
    "AssignmentCreate",
    "AssignmentRead",
    "SiteObjectBase",
    "SiteObjectCreate",
    "SiteObjectRead",

    # media
    "FolderCreate",
    "FolderRead",
    "FolderUpdate",
    "MediaRead",
    "MoveToFolder",
    "ParameterTreeSave",
    "VisibilityUpdate",

    # comments
    "CommentCreate",
    "CommentRead",

    # downloads
    "DownloadableItemRead",
    "PurchaseRead",

    # portfolio
    "PortfolioProjectCreate",
    "PortfolioProjectUpdate",
    "PortfolioUpdate",
]
