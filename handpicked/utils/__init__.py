"""
工具函数模块
"""

from handpicked.utils.datetime import utc_now, ensure_utc, to_iso

__all__ = [
    "utc_now",
    "ensure_utc",
    "to_iso",
]
