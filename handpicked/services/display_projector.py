"""
展示投影

从当前配置派生首页展示数据：过滤 → 排序 → 截断。
"""

from typing import Iterable

from handpicked.core.logging import LogContext, get_logger
from handpicked.models.collection import HandpickedItem
from handpicked.models.schemas import DisplayData
from handpicked.services.access_policy import (
    AccessPolicy,
    DefaultAccessPolicy,
    UserIdentity,
    UserLike,
)
from handpicked.services.collection_registry import CollectionRegistry

logger = get_logger(__name__)


def project_items(items: Iterable[HandpickedItem], max_items: int) -> list[HandpickedItem]:
    """
    激活条目按 display_order 升序（稳定排序，同序保持原位置），取前 max_items 个
    """
    visible = [item for item in items if item.is_active]
    visible.sort(key=lambda item: item.display_order)
    return visible[:max(max_items, 0)]


class DisplayProjector:
    """精选集合展示服务"""

    def __init__(self, registry: CollectionRegistry, access_policy: AccessPolicy | None = None):
        self._registry = registry
        self._access_policy = access_policy or DefaultAccessPolicy()

    @property
    def access_policy(self) -> AccessPolicy:
        return self._access_policy

    def get_collection_for_display(self, user: UserLike) -> DisplayData | None:
        """
        获取首页展示用的精选集合

        以下情况返回 None：集合未启用、用户无可见条目、截断后为空。
        """
        identity = UserIdentity.coerce(user)

        with LogContext.scope("display", user_id=identity.user_id):
            config = self._registry.snapshot()

            if not config.is_enabled:
                logger.debug("Handpicked collection is disabled")
                return None

            items = self._registry.get_items_for_user(
                identity, self._access_policy, snapshot=config
            )
            if not items:
                logger.debug(f"No handpicked items available for user {identity.user_id}")
                return None

            selected = project_items(items, config.max_items)
            if not selected:
                logger.debug(f"No active handpicked items available for user {identity.user_id}")
                return None

            return DisplayData(
                title=config.title,
                description=config.description,
                items=selected,
                display_order=config.display_order,
                total_items=len(selected),
            )

    def get_all_collections_for_user(self, user: UserLike) -> list[DisplayData]:
        """当前只有一个逻辑集合，返回 0 或 1 个元素"""
        collection = self.get_collection_for_display(user)
        return [collection] if collection is not None else []

    def user_has_access(self, user: UserLike) -> bool:
        """用户是否可以看到精选集合"""
        return self._access_policy.has_access(user)
