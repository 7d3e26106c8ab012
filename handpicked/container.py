"""
应用上下文容器

- AppContext 封装所有服务实例，进程启动时创建一次并注入到路由
- 清晰的生命周期管理（create / shutdown）
- 与 FastAPI 依赖注入系统兼容
- 易于测试（create 接受独立的 AppConfig，reset 清理单例）
"""

import os
from dataclasses import dataclass, field
from typing import Annotated

from dotenv import find_dotenv, load_dotenv
from fastapi import Depends, Header, Query

from handpicked.core.logging import get_logger
from handpicked.services import (
    DEFAULT_VIEW_PERMISSION,
    AccessPolicy,
    CollectionRegistry,
    ConfigStore,
    DisplayProjector,
    UserIdentity,
    create_access_policy,
    create_config_store,
)

logger = get_logger(__name__)


# =============================================================================
# 配置
# =============================================================================


@dataclass
class AppConfig:
    """应用配置"""

    data_dir: str = "data"
    store_type: str = "file"
    access_policy: str = "default"
    access_permission: str = DEFAULT_VIEW_PERMISSION

    # 日志（测试中直接构造 AppConfig 时不接管 root logger）
    configure_logging: bool = False
    log_to_file: bool = True

    @classmethod
    def from_env(cls) -> "AppConfig":
        """从环境变量（及当前目录的 .env 文件）创建配置"""
        load_dotenv(find_dotenv(usecwd=True))
        return cls(
            data_dir=os.getenv("HANDPICKED_DATA_DIR", "data"),
            store_type=os.getenv("HANDPICKED_STORE", "file").lower(),
            access_policy=os.getenv("HANDPICKED_ACCESS_POLICY", "default").lower(),
            access_permission=os.getenv("HANDPICKED_ACCESS_PERMISSION", DEFAULT_VIEW_PERMISSION),
            configure_logging=True,
            log_to_file=os.getenv("LOG_TO_FILE", "true").lower() == "true",
        )


# =============================================================================
# 应用上下文
# =============================================================================


@dataclass
class AppContext:
    """
    应用上下文容器

    Usage:
        ```python
        ctx = AppContext.create(AppConfig(data_dir="/var/lib/handpicked"))
        ctx.registry.add_item(item)
        ctx.projector.get_collection_for_display("user-1")
        ctx.shutdown()
        ```
    """

    config: AppConfig = field(default_factory=AppConfig)
    store: ConfigStore | None = None
    registry: CollectionRegistry | None = None
    access_policy: AccessPolicy | None = None
    projector: DisplayProjector | None = None

    _instance = None

    @classmethod
    def create(cls, config: AppConfig | None = None) -> "AppContext":
        """创建并初始化应用上下文（已存在时直接返回）"""
        if cls._instance is not None:
            return cls._instance

        config = config or AppConfig.from_env()
        ctx = cls(config=config)

        ctx.store = create_config_store(config.store_type, config.data_dir)
        ctx.registry = CollectionRegistry(ctx.store)
        ctx.access_policy = create_access_policy(config.access_policy, config.access_permission)
        ctx.projector = DisplayProjector(ctx.registry, ctx.access_policy)

        cls._instance = ctx
        logger.info(
            f"AppContext initialized - store={ctx.store.store_type}, "
            f"access_policy={ctx.access_policy.name}, items={len(ctx.registry)}"
        )
        return ctx

    def shutdown(self) -> None:
        """释放服务引用（最后一次快照已在磁盘上）"""
        self.projector = None
        self.registry = None
        self.store = None
        AppContext._instance = None
        logger.info("AppContext shutdown")

    @classmethod
    def get_instance(cls) -> "AppContext":
        """获取单例"""
        if cls._instance is None:
            raise RuntimeError("AppContext not initialized")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """重置单例（测试用）"""
        cls._instance = None


# =============================================================================
# FastAPI 依赖注入
# =============================================================================


def get_app_context() -> AppContext:
    return AppContext.get_instance()


def get_registry() -> CollectionRegistry:
    ctx = AppContext.get_instance()
    if ctx.registry is None:
        raise RuntimeError("CollectionRegistry not initialized")
    return ctx.registry


def get_projector() -> DisplayProjector:
    ctx = AppContext.get_instance()
    if ctx.projector is None:
        raise RuntimeError("DisplayProjector not initialized")
    return ctx.projector


def get_user_identity(
    user_id: str = Query("", description="请求用户ID"),
    x_user_permissions: str | None = Header(default=None, description="逗号分隔的权限列表"),
) -> UserIdentity:
    """从查询参数和 X-User-Permissions 请求头解析用户身份"""
    return UserIdentity.from_header(user_id, x_user_permissions)


# =============================================================================
# 依赖类型别名
# =============================================================================

AppContextDep = Annotated[AppContext, Depends(get_app_context)]
RegistryDep = Annotated[CollectionRegistry, Depends(get_registry)]
ProjectorDep = Annotated[DisplayProjector, Depends(get_projector)]
UserIdentityDep = Annotated[UserIdentity, Depends(get_user_identity)]
