"""
统一异常处理模块

提供：
1. 自定义异常类
2. 统一错误响应格式
3. 异常处理器注册函数

核心服务层不抛出业务异常（返回 OperationResult），
由路由层根据结果决定抛出哪一种 APIException。
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from handpicked.core.logging import get_logger
from handpicked.models.schemas import ErrorResponse

logger = get_logger(__name__)


# =============================================================================
# 自定义异常类
# =============================================================================


class APIException(Exception):
    """API 基础异常"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        detail: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.detail = detail
        super().__init__(message)


class ItemNotFoundError(APIException):
    """条目不存在"""

    def __init__(self, message: str, detail: Any = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            detail=detail,
        )


class ItemConflictError(APIException):
    """条目 ID 已存在"""

    def __init__(self, message: str, detail: Any = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            detail=detail,
        )


class ItemValidationError(APIException):
    """路径参数与请求体不一致"""

    def __init__(self, message: str, detail: Any = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            detail=detail,
        )


class AuthorizationError(APIException):
    """无权访问精选集合"""

    def __init__(self, message: str = "Access to handpicked collections denied", detail: Any = None):
        super().__init__(
            message=message,
            status_code=403,
            error_code="AUTHORIZATION_ERROR",
            detail=detail,
        )


# =============================================================================
# 错误响应工厂函数
# =============================================================================


def create_error_response(
    status_code: int,
    error_code: str,
    message: str,
    detail: Any = None,
) -> JSONResponse:
    """创建统一格式的错误响应"""
    content = ErrorResponse(
        status=status_code,
        code=error_code,
        message=message,
        detail=detail,
    ).model_dump()

    return JSONResponse(status_code=status_code, content=content)


# =============================================================================
# 异常处理器注册
# =============================================================================


def setup_exception_handlers(app: FastAPI) -> None:
    """
    注册所有异常处理器

    按优先级从高到低：
    1. 自定义 API 异常
    2. 请求验证错误 (422)
    3. HTTP 异常
    4. 通用异常 (500)
    """

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        """处理自定义 API 异常"""
        logger.warning(f"API Exception: {exc.error_code} - {exc.message}")
        return create_error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            detail=exc.detail,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """处理请求验证错误"""
        logger.warning(f"Validation error: {exc.errors()}")
        return create_error_response(
            status_code=422,
            error_code="VALIDATION_ERROR",
            message="Request validation failed",
            detail=jsonable_errors(exc),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """处理 HTTP 异常（含路由不存在、方法不允许）"""
        return create_error_response(
            status_code=exc.status_code,
            error_code=f"HTTP_{exc.status_code}",
            message=str(exc.detail) if exc.detail else "HTTP Error",
            detail=exc.detail if isinstance(exc.detail, dict) else None,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """处理所有未捕获的异常"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return create_error_response(
            status_code=500,
            error_code="INTERNAL_SERVER_ERROR",
            message="Internal server error",
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """验证错误中的 ctx 可能包含异常对象，只保留可序列化字段"""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
