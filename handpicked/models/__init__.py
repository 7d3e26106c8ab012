"""
数据模型模块
"""

from handpicked.models.collection import (
    DEFAULT_DESCRIPTION,
    DEFAULT_MAX_ITEMS,
    DEFAULT_TITLE,
    HandpickedCollectionConfig,
    HandpickedItem,
)
from handpicked.models.schemas import (
    AccessResponse,
    DisplayData,
    ErrorResponse,
    HealthResponse,
    PluginInfo,
)

__all__ = [
    # 持久化模型
    "DEFAULT_DESCRIPTION",
    "DEFAULT_MAX_ITEMS",
    "DEFAULT_TITLE",
    "HandpickedCollectionConfig",
    "HandpickedItem",
    # API 模型
    "AccessResponse",
    "DisplayData",
    "ErrorResponse",
    "HealthResponse",
    "PluginInfo",
]
