"""
中间件模块

提供 FastAPI 应用的中间件配置
"""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from handpicked.core.correlation import correlator, generate_request_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def setup_middlewares(app: FastAPI) -> None:
    """
    配置所有中间件

    Args:
        app: FastAPI 应用实例
    """
    _setup_cors(app)
    _setup_correlation_id(app)


def _setup_cors(app: FastAPI) -> None:
    """配置 CORS 中间件（前端首页跨域读取展示数据）"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _setup_correlation_id(app: FastAPI) -> None:
    """配置 Correlation ID 中间件"""

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        """
        为每个请求生成唯一的 correlation_id

        - 从请求头 X-Correlation-ID 获取，或自动生成
        - 在响应头中返回 X-Correlation-ID
        """
        correlation_id = request.headers.get(CORRELATION_HEADER)
        if not correlation_id:
            correlation_id = f"R{generate_request_id()}"

        with correlator.scope(correlation_id):
            logger.info(f"→ {request.method} {request.url.path}")

            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id

            logger.info(f"← {request.method} {request.url.path} [{response.status_code}]")

            return response
