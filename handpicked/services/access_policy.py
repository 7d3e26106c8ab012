"""
访问策略

UserIdentity 统一了“字符串用户ID”和“带权限的用户对象”两种身份表示；
AccessPolicy 是可替换的策略：
- DefaultAccessPolicy: 用户ID 非空即可见
- AllowAllAccessPolicy: 总是可见
- PermissionAccessPolicy: 需要指定权限（如管理员、受信设备）
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Union

from handpicked.core.logging import get_logger
from handpicked.models.collection import HandpickedItem

logger = get_logger(__name__)

DEFAULT_VIEW_PERMISSION = "handpicked:view"


@dataclass(frozen=True)
class UserIdentity:
    """不透明的用户身份"""

    user_id: str = ""
    permissions: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_valid(self) -> bool:
        return bool(self.user_id and self.user_id.strip())

    def has_permission(self, kind: str) -> bool:
        return kind in self.permissions

    @classmethod
    def anonymous(cls) -> "UserIdentity":
        return cls()

    @classmethod
    def coerce(cls, value: "UserLike") -> "UserIdentity":
        """字符串或 None 转为 UserIdentity"""
        if isinstance(value, UserIdentity):
            return value
        if value is None:
            return cls.anonymous()
        return cls(user_id=str(value))

    @classmethod
    def from_header(cls, user_id: str | None, permissions_header: str | None) -> "UserIdentity":
        """从 user_id 与逗号分隔的权限头构造"""
        permissions = frozenset(
            p.strip() for p in (permissions_header or "").split(",") if p.strip()
        )
        return cls(user_id=user_id or "", permissions=permissions)


UserLike = Union[UserIdentity, str, None]


class AccessPolicy(ABC):
    """
    访问策略基类

    子类只需实现 _check；has_access / visible_items 负责
    身份转换并把策略内部的异常转为安全默认值。
    """

    name: str = "abstract"

    @abstractmethod
    def _check(self, identity: UserIdentity) -> bool:
        ...

    def filter_items(
        self, identity: UserIdentity, items: list[HandpickedItem]
    ) -> list[HandpickedItem]:
        """按用户过滤可见条目（扩展点，默认不过滤）"""
        return items

    def has_access(self, user: UserLike) -> bool:
        identity = UserIdentity.coerce(user)
        try:
            return bool(self._check(identity))
        except Exception as e:
            logger.error(f"Error checking user access for handpicked collections: {e}")
            return False

    def visible_items(
        self, user: UserLike, items: Iterable[HandpickedItem]
    ) -> list[HandpickedItem]:
        identity = UserIdentity.coerce(user)
        try:
            return list(self.filter_items(identity, list(items)))
        except Exception as e:
            logger.error(f"Error filtering handpicked items for user {identity.user_id}: {e}")
            return []


class DefaultAccessPolicy(AccessPolicy):
    """有效（非空）用户ID 即可见"""

    name = "default"

    def _check(self, identity: UserIdentity) -> bool:
        return identity.is_valid


class AllowAllAccessPolicy(AccessPolicy):
    """不做任何限制"""

    name = "allow_all"

    def _check(self, identity: UserIdentity) -> bool:
        return True


class PermissionAccessPolicy(AccessPolicy):
    """需要有效用户且持有指定权限"""

    name = "permission"

    def __init__(self, permission: str = DEFAULT_VIEW_PERMISSION):
        self.permission = permission

    def _check(self, identity: UserIdentity) -> bool:
        return identity.is_valid and identity.has_permission(self.permission)


def create_access_policy(
    name: str = "default", permission: str = DEFAULT_VIEW_PERMISSION
) -> AccessPolicy:
    """
    按名称创建访问策略

    Raises:
        ValueError: 未知的策略名称
    """
    if name == DefaultAccessPolicy.name:
        return DefaultAccessPolicy()
    if name == AllowAllAccessPolicy.name:
        return AllowAllAccessPolicy()
    if name == PermissionAccessPolicy.name:
        return PermissionAccessPolicy(permission)
    raise ValueError(f"Unknown access policy: {name}")
