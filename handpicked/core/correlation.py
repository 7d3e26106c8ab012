"""
Correlation ID 模块

为每个请求生成短 ID 并通过 contextvars 传递，日志格式化器读取它：
- ContextualCorrelator: 上下文管理器，支持作用域嵌套
- generate_request_id: nanoid 短 ID

使用示例:
    with correlator.scope("R1234xyz"):
        logger.info("Processing...")  # 日志自动包含 correlation_id
"""

import contextvars
from contextlib import contextmanager
from typing import Generator

import nanoid


# 62 字符字母表（数字 + 大小写字母），URL-safe
ID_GENERATION_ALPHABET: str = (
    "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)
ID_SIZE: int = 10

_correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


def generate_request_id() -> str:
    """生成唯一请求 ID"""
    return nanoid.generate(alphabet=ID_GENERATION_ALPHABET, size=ID_SIZE)


class ContextualCorrelator:
    """
    上下文关联器

    使用示例:
        with correlator.scope("R1234xyz"):
            print(correlator.correlation_id)  # R1234xyz

            with correlator.scope("save"):
                print(correlator.correlation_id)  # R1234xyz::save
    """

    @contextmanager
    def scope(self, scope_id: str) -> Generator[str, None, None]:
        """
        进入新的作用域

        Args:
            scope_id: 作用域标识符

        Yields:
            当前完整的 correlation_id
        """
        current = _correlation_id.get()
        new_scope = f"{current}::{scope_id}" if current else scope_id

        token_id = _correlation_id.set(new_scope)

        try:
            yield new_scope
        finally:
            _correlation_id.reset(token_id)

    @property
    def correlation_id(self) -> str:
        """获取当前 correlation_id"""
        return _correlation_id.get() or "-"


# 全局单例
correlator = ContextualCorrelator()
