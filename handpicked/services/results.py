"""
核心服务操作结果

变更操作不抛出业务异常，而是返回带标签的结果，
由调用方（路由层）决定记录什么、返回什么状态码。
"""

from dataclasses import dataclass
from enum import Enum

from handpicked.models.collection import HandpickedItem


class OperationStatus(str, Enum):
    """操作结果状态"""

    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass(frozen=True)
class OperationResult:
    """
    变更操作结果

    - OK: 内存已变更且已落盘
    - PERSISTENCE_FAILED: 内存已变更，落盘失败（不回滚）
    - NOT_FOUND / CONFLICT: 软失败，什么都没有发生
    """

    status: OperationStatus
    item_id: str | None = None
    item: HandpickedItem | None = None
    persisted: bool = False

    @property
    def ok(self) -> bool:
        """变更是否已在内存中生效"""
        return self.status in (OperationStatus.OK, OperationStatus.PERSISTENCE_FAILED)

    @classmethod
    def applied(
        cls,
        persisted: bool,
        item_id: str | None = None,
        item: HandpickedItem | None = None,
    ) -> "OperationResult":
        status = OperationStatus.OK if persisted else OperationStatus.PERSISTENCE_FAILED
        return cls(status=status, item_id=item_id, item=item, persisted=persisted)

    @classmethod
    def not_found(cls, item_id: str) -> "OperationResult":
        return cls(status=OperationStatus.NOT_FOUND, item_id=item_id)

    @classmethod
    def conflict(cls, item_id: str) -> "OperationResult":
        return cls(status=OperationStatus.CONFLICT, item_id=item_id)
