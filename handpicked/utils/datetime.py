"""
addedDate 时间处理

内存中统一为带时区的 UTC datetime，落盘与接口输出为 ISO 8601 字符串。
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """条目默认的添加时间"""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    将 addedDate 规整为 UTC

    无时区的值（手工编辑或旧文件写入）按 UTC 解释，
    其他时区换算到 UTC，保证条目之间可以直接比较。

    Example:
        >>> ensure_utc(datetime(2026, 1, 1, 12, 0)).isoformat()
        '2026-01-01T12:00:00+00:00'
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """addedDate 的 JSON 表示，始终带 +00:00 偏移"""
    return ensure_utc(dt).isoformat()
