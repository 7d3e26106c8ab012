"""
服务模块

依赖顺序（叶子在前）：
ConfigStore → CollectionRegistry → DisplayProjector (+ AccessPolicy)
"""

from handpicked.services.config_store import (
    CONFIG_FILENAME,
    ConfigStore,
    FileConfigStore,
    MemoryConfigStore,
    create_config_store,
)
from handpicked.services.results import OperationResult, OperationStatus
from handpicked.services.collection_registry import CollectionRegistry, active_items
from handpicked.services.access_policy import (
    DEFAULT_VIEW_PERMISSION,
    AccessPolicy,
    AllowAllAccessPolicy,
    DefaultAccessPolicy,
    PermissionAccessPolicy,
    UserIdentity,
    create_access_policy,
)
from handpicked.services.display_projector import DisplayProjector, project_items

__all__ = [
    # ConfigStore
    "CONFIG_FILENAME",
    "ConfigStore",
    "FileConfigStore",
    "MemoryConfigStore",
    "create_config_store",
    # Results
    "OperationResult",
    "OperationStatus",
    # Registry
    "CollectionRegistry",
    "active_items",
    # Access
    "DEFAULT_VIEW_PERMISSION",
    "AccessPolicy",
    "AllowAllAccessPolicy",
    "DefaultAccessPolicy",
    "PermissionAccessPolicy",
    "UserIdentity",
    "create_access_policy",
    # Display
    "DisplayProjector",
    "project_items",
]
