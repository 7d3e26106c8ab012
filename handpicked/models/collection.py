"""
精选集合数据模型

持久化 JSON 与 HTTP 接口共用同一套模型：
- Python 属性使用 snake_case
- JSON 字段使用 camelCase 别名（isEnabled / itemId / addedDate ...）
- 两种名称在输入时均可识别
"""

from datetime import datetime
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from handpicked.utils.datetime import ensure_utc, to_iso, utc_now


DEFAULT_TITLE = "Handpicked"
DEFAULT_DESCRIPTION = "Curated selection of our favorite titles"
DEFAULT_MAX_ITEMS = 20


class HandpickedItem(BaseModel):
    """精选条目"""

    item_id: str = Field(default="", alias="itemId", description="条目唯一标识，创建后不可变")
    name: str = Field(default="", description="条目名称")
    type: str = Field(default="", description="条目类型（Movie、Series 等）")
    custom_description: Optional[str] = Field(
        default=None, alias="customDescription", description="自定义描述"
    )
    handpicked_reason: Optional[str] = Field(
        default=None, alias="handpickedReason", description="入选理由"
    )
    display_order: int = Field(default=0, alias="displayOrder", description="展示排序键，可重复")
    added_date: datetime = Field(default_factory=utc_now, alias="addedDate", description="添加时间")
    added_by: str = Field(default="", alias="addedBy", description="添加人")
    is_active: bool = Field(default=True, alias="isActive", description="是否展示（软删除标记）")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "itemId": "f0e1d2c3b4a5",
                "name": "Spirited Away",
                "type": "Movie",
                "customDescription": None,
                "handpickedReason": "Staff favourite",
                "displayOrder": 1,
                "addedDate": "2026-01-01T12:00:00+00:00",
                "addedBy": "admin",
                "isActive": True,
            }
        },
    )

    @field_validator("added_date")
    @classmethod
    def _normalize_added_date(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_serializer("added_date", when_used="json")
    def _serialize_added_date(self, value: datetime) -> str:
        return to_iso(value)


class HandpickedCollectionConfig(BaseModel):
    """精选集合配置（进程内单例，整体持久化）"""

    title: str = Field(default=DEFAULT_TITLE, description="集合标题")
    description: str = Field(default=DEFAULT_DESCRIPTION, description="集合描述")
    is_enabled: bool = Field(default=True, alias="isEnabled", description="是否启用")
    max_items: int = Field(
        default=DEFAULT_MAX_ITEMS, ge=0, alias="maxItems", description="展示时的最大条目数"
    )
    display_order: int = Field(default=0, alias="displayOrder", description="集合间排序提示")
    items: List[HandpickedItem] = Field(default_factory=list, description="条目列表（插入顺序）")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _reject_duplicate_item_ids(self) -> "HandpickedCollectionConfig":
        duplicates = self.duplicate_item_ids()
        if duplicates:
            raise ValueError(f"Duplicate item ids: {', '.join(duplicates)}")
        return self

    def duplicate_item_ids(self) -> list[str]:
        """返回重复出现的条目ID（按首次重复的顺序）"""
        seen: set[str] = set()
        duplicates: list[str] = []
        for item in self.items:
            if item.item_id in seen and item.item_id not in duplicates:
                duplicates.append(item.item_id)
            seen.add(item.item_id)
        return duplicates

    def find_index(self, item_id: str) -> int:
        """返回第一个匹配条目的下标，不存在时返回 -1"""
        for index, item in enumerate(self.items):
            if item.item_id == item_id:
                return index
        return -1

    def to_document(self) -> dict:
        """转为持久化 JSON 文档"""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_document(cls, data: dict) -> "HandpickedCollectionConfig":
        """从持久化 JSON 文档创建"""
        return cls.model_validate(data)
