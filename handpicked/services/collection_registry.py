"""
精选集合注册表

持有进程内唯一的 HandpickedCollectionConfig，所有变更都经过这里：

- 变更采用写时复制：复制当前配置 → 修改副本 → 替换引用 → 落盘，
  整个过程在同一把写锁内完成，两个写者不会交错
- 读操作直接取当前引用并返回深拷贝，不加锁，
  读到的要么是写前状态，要么是写后状态
- 落盘失败不回滚内存状态（结果中 persisted=False）
"""

import threading
from typing import TYPE_CHECKING

from handpicked.core.logging import get_logger
from handpicked.models.collection import HandpickedCollectionConfig, HandpickedItem
from handpicked.services.config_store import ConfigStore
from handpicked.services.results import OperationResult

if TYPE_CHECKING:
    from handpicked.services.access_policy import AccessPolicy, UserLike

logger = get_logger(__name__)


def active_items(config: HandpickedCollectionConfig) -> list[HandpickedItem]:
    """仅保留 is_active 的条目，保持原有顺序"""
    return [item for item in config.items if item.is_active]


class CollectionRegistry:
    """
    精选集合注册表

    Usage:
        ```python
        registry = CollectionRegistry(FileConfigStore("data"))
        registry.add_item(HandpickedItem(item_id="a1", name="Alien", type="Movie"))
        registry.get_items()
        ```
    """

    def __init__(self, store: ConfigStore):
        self._store = store
        self._lock = threading.Lock()
        self._config = store.load()

    @property
    def store(self) -> ConfigStore:
        return self._store

    # =========================================================================
    # 读操作
    # =========================================================================

    def snapshot(self) -> HandpickedCollectionConfig:
        """当前配置的只读引用（调用方不得修改）"""
        return self._config

    def get_configuration(self) -> HandpickedCollectionConfig:
        """返回当前配置的深拷贝"""
        return self._config.model_copy(deep=True)

    def get_items(self) -> list[HandpickedItem]:
        """返回全部条目（含未激活）"""
        return [item.model_copy(deep=True) for item in self._config.items]

    def get_items_for_user(
        self,
        user: "UserLike",
        access_policy: "AccessPolicy | None" = None,
        snapshot: HandpickedCollectionConfig | None = None,
    ) -> list[HandpickedItem]:
        """
        返回用户可见的条目

        Args:
            user: 用户身份（UserIdentity 或用户ID）
            access_policy: 按用户过滤的扩展点，None 时不过滤
            snapshot: 使用指定的配置快照，None 时取当前配置

        Returns:
            激活条目的深拷贝列表
        """
        config = snapshot if snapshot is not None else self._config
        items = [item.model_copy(deep=True) for item in active_items(config)]
        if access_policy is not None:
            items = access_policy.visible_items(user, items)
        return items

    def __len__(self) -> int:
        return len(self._config.items)

    # =========================================================================
    # 写操作
    # =========================================================================

    def update_configuration(self, config: HandpickedCollectionConfig) -> OperationResult:
        """整体替换配置（无合并语义）；条目ID重复时不做任何修改"""
        duplicates = config.duplicate_item_ids()
        if duplicates:
            logger.warning(f"Configuration rejected, duplicate item ids: {duplicates}")
            return OperationResult.conflict(duplicates[0])

        replacement = config.model_copy(deep=True)
        with self._lock:
            persisted = self._commit(replacement)
        logger.info("Handpicked collection configuration updated")
        return OperationResult.applied(persisted)

    def add_item(self, item: HandpickedItem) -> OperationResult:
        """追加条目；ID 已存在时不做任何修改"""
        with self._lock:
            if self._config.find_index(item.item_id) >= 0:
                logger.warning(f"Item {item.item_id} is already in the handpicked collection")
                return OperationResult.conflict(item.item_id)

            updated = self._config.model_copy(deep=True)
            stored = item.model_copy(deep=True)
            updated.items.append(stored)
            persisted = self._commit(updated)

        logger.info(f"Added item {item.item_id} to handpicked collection")
        return OperationResult.applied(persisted, item.item_id, stored.model_copy(deep=True))

    def update_item(self, item: HandpickedItem) -> OperationResult:
        """原位替换同 ID 条目，保留原 added_date；不存在时不做任何修改"""
        with self._lock:
            index = self._config.find_index(item.item_id)
            if index < 0:
                logger.warning(f"Item {item.item_id} is not in the handpicked collection, update ignored")
                return OperationResult.not_found(item.item_id)

            updated = self._config.model_copy(deep=True)
            stored = item.model_copy(
                update={"added_date": updated.items[index].added_date}, deep=True
            )
            updated.items[index] = stored
            persisted = self._commit(updated)

        logger.info(f"Updated item {item.item_id} in handpicked collection")
        return OperationResult.applied(persisted, item.item_id, stored.model_copy(deep=True))

    def remove_item(self, item_id: str) -> OperationResult:
        """删除第一个匹配条目；不存在时不做任何修改"""
        with self._lock:
            index = self._config.find_index(item_id)
            if index < 0:
                logger.debug(f"Item {item_id} is not in the handpicked collection, nothing to remove")
                return OperationResult.not_found(item_id)

            updated = self._config.model_copy(deep=True)
            removed = updated.items.pop(index)
            persisted = self._commit(updated)

        logger.info(f"Removed item {item_id} from handpicked collection")
        return OperationResult.applied(persisted, item_id, removed)

    def _commit(self, updated: HandpickedCollectionConfig) -> bool:
        """替换引用并落盘，必须在写锁内调用"""
        self._config = updated
        persisted = self._store.save(updated)
        if not persisted:
            logger.error("Handpicked collection changed in memory but could not be persisted")
        return persisted
