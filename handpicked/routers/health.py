"""
健康检查路由模块
"""

from fastapi import APIRouter

from handpicked import __version__
from handpicked.container import AppContextDep
from handpicked.models import HealthResponse


def create_router() -> APIRouter:
    """
    创建健康检查路由器（工厂函数）

    Returns:
        配置完成的 APIRouter 实例
    """
    router = APIRouter(tags=["Health"])

    @router.get(
        "/health",
        response_model=HealthResponse,
        summary="健康检查",
        description="检查服务与配置存储状态",
    )
    def health_check(ctx: AppContextDep):
        config = ctx.registry.snapshot()
        return HealthResponse(
            status="healthy",
            version=__version__,
            store_type=ctx.store.store_type,
            total_items=len(config.items),
            enabled=config.is_enabled,
        )

    return router
