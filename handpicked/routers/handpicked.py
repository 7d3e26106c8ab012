"""
精选集合管理路由

端点：
- GET    /Handpicked/Configuration        — 获取配置
- POST   /Handpicked/Configuration        — 整体替换配置
- GET    /Handpicked/Items                — 全部条目（含未激活）
- GET    /Handpicked/Items/User           — 指定用户可见的条目
- POST   /Handpicked/Items                — 添加条目
- PUT    /Handpicked/Items/{item_id}      — 更新条目
- DELETE /Handpicked/Items/{item_id}      — 删除条目
"""

from fastapi import APIRouter, Response, status

from handpicked.container import ProjectorDep, RegistryDep, UserIdentityDep
from handpicked.core.exceptions import ItemConflictError, ItemNotFoundError, ItemValidationError
from handpicked.core.logging import get_logger
from handpicked.models import ErrorResponse, HandpickedCollectionConfig, HandpickedItem
from handpicked.services import OperationStatus

logger = get_logger(__name__)


def create_router() -> APIRouter:
    """创建精选集合管理路由"""
    router = APIRouter(prefix="/Handpicked", tags=["Handpicked"])

    @router.get(
        "/Configuration",
        response_model=HandpickedCollectionConfig,
        summary="获取配置",
    )
    def get_configuration(registry: RegistryDep):
        return registry.get_configuration()

    @router.post(
        "/Configuration",
        response_model=HandpickedCollectionConfig,
        summary="替换配置",
        description="整体替换集合配置（含条目列表），无合并语义",
    )
    def update_configuration(config: HandpickedCollectionConfig, registry: RegistryDep):
        registry.update_configuration(config)
        return config

    @router.get(
        "/Items",
        response_model=list[HandpickedItem],
        summary="全部条目",
    )
    def get_items(registry: RegistryDep):
        return registry.get_items()

    @router.get(
        "/Items/User",
        response_model=list[HandpickedItem],
        summary="用户可见条目",
        description="仅返回激活条目，并经过访问策略的按用户过滤",
    )
    def get_items_for_user(
        registry: RegistryDep,
        projector: ProjectorDep,
        identity: UserIdentityDep,
    ):
        return registry.get_items_for_user(identity, projector.access_policy)

    @router.post(
        "/Items",
        response_model=HandpickedItem,
        responses={409: {"model": ErrorResponse, "description": "Item already exists"}},
        summary="添加条目",
    )
    def add_item(item: HandpickedItem, registry: RegistryDep):
        result = registry.add_item(item)
        if result.status == OperationStatus.CONFLICT:
            raise ItemConflictError(
                f"Item {item.item_id} is already in the handpicked collection",
                detail={"itemId": item.item_id},
            )
        return result.item

    @router.put(
        "/Items/{item_id}",
        response_model=HandpickedItem,
        responses={
            400: {"model": ErrorResponse, "description": "Item ID mismatch"},
            404: {"model": ErrorResponse, "description": "Item not found"},
        },
        summary="更新条目",
    )
    def update_item(item_id: str, item: HandpickedItem, registry: RegistryDep):
        if item.item_id != item_id:
            raise ItemValidationError(
                "Item ID mismatch",
                detail={"path": item_id, "body": item.item_id},
            )

        result = registry.update_item(item)
        if result.status == OperationStatus.NOT_FOUND:
            raise ItemNotFoundError(
                f"Item {item_id} is not in the handpicked collection",
                detail={"itemId": item_id},
            )
        return result.item

    @router.delete(
        "/Items/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="删除条目",
        description="幂等：条目不存在时同样返回 204",
    )
    def remove_item(item_id: str, registry: RegistryDep):
        registry.remove_item(item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
