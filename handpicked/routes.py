"""
API 路由聚合
"""

from fastapi import APIRouter

from handpicked.routers import display, handpicked, health

router = APIRouter()
router.include_router(health.create_router())
router.include_router(handpicked.create_router())
router.include_router(display.create_router())
