"""
精选集合展示路由

用户身份来自 user_id 查询参数与 X-User-Permissions 请求头。

端点：
- GET /Handpicked/Display/Collection   — 单个集合（可能为 null）
- GET /Handpicked/Display/Collections  — 集合列表（0 或 1 个）
- GET /Handpicked/Display/Access       — 访问检查
"""

from typing import Optional

from fastapi import APIRouter

from handpicked.container import ProjectorDep, UserIdentityDep
from handpicked.core.exceptions import AuthorizationError
from handpicked.core.logging import get_logger
from handpicked.models import AccessResponse, DisplayData, ErrorResponse
from handpicked.services import DisplayProjector, UserIdentity

logger = get_logger(__name__)


def _require_access(projector: DisplayProjector, identity: UserIdentity) -> None:
    if not projector.user_has_access(identity):
        raise AuthorizationError(detail={"userId": identity.user_id})


def create_router() -> APIRouter:
    """创建精选集合展示路由"""
    router = APIRouter(prefix="/Handpicked/Display", tags=["Display"])

    @router.get(
        "/Collection",
        response_model=Optional[DisplayData],
        responses={403: {"model": ErrorResponse, "description": "Access denied"}},
        summary="首页精选集合",
    )
    def get_collection(projector: ProjectorDep, identity: UserIdentityDep):
        _require_access(projector, identity)
        return projector.get_collection_for_display(identity)

    @router.get(
        "/Collections",
        response_model=list[DisplayData],
        responses={403: {"model": ErrorResponse, "description": "Access denied"}},
        summary="全部可见集合",
    )
    def get_all_collections(projector: ProjectorDep, identity: UserIdentityDep):
        _require_access(projector, identity)
        return projector.get_all_collections_for_user(identity)

    @router.get(
        "/Access",
        response_model=AccessResponse,
        summary="访问检查",
    )
    def has_access(projector: ProjectorDep, identity: UserIdentityDep):
        return AccessResponse(
            user_id=identity.user_id,
            has_access=projector.user_has_access(identity),
        )

    return router
