"""
API 请求/响应模型
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from handpicked.models.collection import HandpickedItem


class DisplayData(BaseModel):
    """前端展示用的集合投影"""

    title: str = Field(..., description="集合标题")
    description: str = Field(..., description="集合描述")
    items: List[HandpickedItem] = Field(default_factory=list, description="排序并截断后的条目")
    display_order: int = Field(default=0, alias="displayOrder", description="集合排序提示")
    total_items: int = Field(default=0, alias="totalItems", description="返回的条目数")

    model_config = ConfigDict(populate_by_name=True)


class AccessResponse(BaseModel):
    """访问权限检查响应"""

    user_id: str = Field(..., alias="userId", description="用户ID")
    has_access: bool = Field(..., alias="hasAccess", description="是否可见精选集合")

    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    """健康检查响应"""

    status: str = Field(..., description="服务状态")
    version: str = Field(..., description="版本号")
    store_type: str = Field(..., description="存储类型：file | memory")
    total_items: int = Field(default=0, description="存储中的条目数（含未激活）")
    enabled: bool = Field(default=True, description="集合是否启用")


class PluginInfo(BaseModel):
    """插件信息"""

    name: str
    description: str
    version: str
    author: str
    docs: str = "/docs"
    health: str = "/api/v1/health"


class ErrorResponse(BaseModel):
    """错误响应"""

    status: int = Field(..., description="HTTP 状态码")
    code: str = Field(..., description="错误码")
    message: str = Field(..., description="错误信息")
    detail: Optional[Any] = Field(default=None, description="错误详情")
