"""
路由模块

每个路由模块提供 create_router() 工厂函数
"""

from handpicked.routers import display, handpicked, health

__all__ = [
    "display",
    "handpicked",
    "health",
]
