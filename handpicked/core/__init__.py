"""
核心基础设施模块

提供日志、追踪、中间件、异常处理等基础功能
"""

from handpicked.core.correlation import (
    correlator,
    generate_request_id,
    ContextualCorrelator,
)
from handpicked.core.logging import (
    setup_logging,
    get_logger,
    LogContext,
    LogLevel,
)
from handpicked.core.middleware import setup_middlewares
from handpicked.core.exceptions import (
    APIException,
    ItemNotFoundError,
    ItemConflictError,
    ItemValidationError,
    AuthorizationError,
    create_error_response,
    setup_exception_handlers,
)

__all__ = [
    # Correlation
    "correlator",
    "generate_request_id",
    "ContextualCorrelator",
    # Logging
    "setup_logging",
    "get_logger",
    "LogContext",
    "LogLevel",
    # Middleware
    "setup_middlewares",
    # Exceptions
    "APIException",
    "ItemNotFoundError",
    "ItemConflictError",
    "ItemValidationError",
    "AuthorizationError",
    "create_error_response",
    "setup_exception_handlers",
]
