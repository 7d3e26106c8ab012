"""
统一日志模块

- 自动注入请求 correlation_id
- 支持作用域嵌套（LogContext.scope）
- 支持操作计时（LogContext.operation）

使用示例:
    from handpicked.core.logging import get_logger, LogContext

    logger = get_logger(__name__)
    logger.info("Processing request")

    with LogContext.operation("config_store.save", path="data/handpicked-collections.json"):
        write_file()  # 自动计时
"""

from __future__ import annotations
import contextvars
import logging
import os
import time
from contextlib import contextmanager
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any, Iterator

from handpicked.core.correlation import correlator


# =============================================================================
# 日志级别
# =============================================================================


class LogLevel(Enum):
    """日志级别枚举"""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()

    def to_logging_level(self) -> int:
        """转换为 logging 模块级别"""
        return {
            LogLevel.DEBUG: logging.DEBUG,
            LogLevel.INFO: logging.INFO,
            LogLevel.WARNING: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
        }[self]


# =============================================================================
# 上下文变量
# =============================================================================

_log_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "log_context", default={}
)

_scope_stack: contextvars.ContextVar[list[str]] = contextvars.ContextVar(
    "scope_stack", default=[]
)


# =============================================================================
# LogContext - 上下文管理器
# =============================================================================


class LogContext:
    """
    日志上下文管理器

    使用示例:
        with LogContext.scope("display", user_id="u_123"):
            logger.info("Projecting collection")  # [cid] [u_123:display]
    """

    @classmethod
    @contextmanager
    def scope(cls, name: str, **kwargs: Any) -> Iterator[None]:
        """
        进入命名作用域

        Args:
            name: 作用域名称
            **kwargs: 附加上下文属性
        """
        current_stack = _scope_stack.get().copy()
        current_stack.append(name)
        stack_token = _scope_stack.set(current_stack)

        current_ctx = _log_context.get().copy()
        current_ctx.update(kwargs)
        ctx_token = _log_context.set(current_ctx)

        try:
            yield
        finally:
            _scope_stack.reset(stack_token)
            _log_context.reset(ctx_token)

    @classmethod
    @contextmanager
    def operation(
        cls,
        name: str,
        level: LogLevel = LogLevel.DEBUG,
        **kwargs: Any,
    ) -> Iterator[None]:
        """
        操作计时上下文

        记录耗时；异常时记录失败并继续抛出，由调用方决定如何处理。

        Args:
            name: 操作名称
            level: 完成日志的级别
            **kwargs: 附加上下文属性
        """
        logger = get_logger("handpicked.operation")
        t_start = time.time()

        with cls.scope(name, **kwargs):
            try:
                yield
                elapsed = time.time() - t_start
                logger.log(level.to_logging_level(), f"{name} completed in {elapsed:.3f}s")
            except Exception as e:
                elapsed = time.time() - t_start
                logger.debug(f"{name} failed after {elapsed:.3f}s: {e}")
                raise


# =============================================================================
# 日志格式化器
# =============================================================================


class ContextFormatter(logging.Formatter):
    """
    上下文感知的日志格式化器

    输出格式: timestamp [level] [cid] [scope] message
    """

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        """格式化时间戳（支持微秒）"""
        ct = datetime.fromtimestamp(record.created)
        fmt = datefmt or "%Y-%m-%dT%H:%M:%S.%f"
        return ct.strftime(fmt.replace("%f", f"{ct.microsecond:06d}"))

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = correlator.correlation_id
        cid = "*" if not correlation_id or correlation_id == "-" else correlation_id[:11]

        user_id = _log_context.get().get("user_id")
        scopes = _scope_stack.get()
        scope = scopes[-1] if scopes else None

        if user_id and scope:
            record.ctx = f"[{cid}] [{user_id}:{scope}]"
        elif scope:
            record.ctx = f"[{cid}] [{scope}]"
        else:
            record.ctx = f"[{cid}]"
        return super().format(record)


# =============================================================================
# 日志配置
# =============================================================================


_initialized = False


def setup_logging(
    log_dir: str | None = None,
    log_level: str = "INFO",
    console: bool = True,
    file: bool = True,
) -> str | None:
    """
    配置日志系统

    Args:
        log_dir: 日志目录，默认从 LOG_DIR 环境变量读取或使用 "logs"
        log_level: 日志级别，LOG_LEVEL 环境变量优先
        console: 是否输出到控制台
        file: 是否输出到文件

    Returns:
        日志文件路径（如果启用文件输出）
    """
    global _initialized

    if _initialized:
        return None

    log_base_dir = log_dir or os.getenv("LOG_DIR", "logs")
    level_name = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    log_format = "%(asctime)s [%(levelname)-8s] %(ctx)s %(name)s: %(message)s"
    formatter = ContextFormatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    log_file_path = None

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if file:
        now = datetime.now()
        log_path = Path(log_base_dir) / now.strftime("%Y-%m-%d")
        log_path.mkdir(parents=True, exist_ok=True)

        log_file = log_path / (now.strftime("%H-%M-%S") + ".log")
        log_file_path = str(log_file)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _initialized = True
    return log_file_path


def get_logger(name: str) -> logging.Logger:
    """
    获取日志器

    Args:
        name: 日志器名称，通常使用 __name__
    """
    return logging.getLogger(name)


__all__ = [
    "ContextFormatter",
    "LogLevel",
    "LogContext",
    "setup_logging",
    "get_logger",
]
