"""
权限相关 Schema

type 取值:
    MENU   菜单（参与用户菜单树）
    BUTTON 按钮
    API    接口
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PermissionType = Literal["MENU", "BUTTON", "API"]


class PermissionCreate(BaseModel):
    """创建权限请求"""
    name: str = Field(..., min_length=1, max_length=100, description="权限名称")
    code: str = Field(..., min_length=1, max_length=100, description="权限编码，如 system:dept:list")
    type: PermissionType = Field("MENU", description="权限类型")
    parent_id: Optional[str] = Field(None, description="上级权限ID")
    path: Optional[str] = Field(None, max_length=200, description="路由路径")
    component: Optional[str] = Field(None, max_length=200, description="前端组件")
    icon: Optional[str] = Field(None, max_length=100, description="图标")
    sort_order: int = Field(0, ge=0, description="排序")
    status: int = Field(1, ge=0, le=1, description="状态 1启用 0停用")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "部门管理",
            "code": "system:dept",
            "type": "MENU",
            "path": "/system/dept",
            "component": "system/dept/index",
            "icon": "tree"
        }
    })


class PermissionUpdate(BaseModel):
    """更新权限请求"""
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="权限名称")
    code: Optional[str] = Field(None, min_length=1, max_length=100, description="权限编码")
    type: Optional[PermissionType] = Field(None, description="权限类型")
    parent_id: Optional[str] = Field(None, description="上级权限ID")
    path: Optional[str] = Field(None, max_length=200, description="路由路径")
    component: Optional[str] = Field(None, max_length=200, description="前端组件")
    icon: Optional[str] = Field(None, max_length=100, description="图标")
    sort_order: Optional[int] = Field(None, ge=0, description="排序")
    status: Optional[int] = Field(None, ge=0, le=1, description="状态")


class PermissionResponse(BaseModel):
    """权限响应"""
    id: str = Field(..., description="权限ID")
    name: str = Field(..., description="权限名称")
    code: str = Field(..., description="权限编码")
    type: str = Field(..., description="权限类型")
    parent_id: Optional[str] = Field(None, description="上级权限ID")
    path: Optional[str] = Field(None, description="路由路径")
    component: Optional[str] = Field(None, description="前端组件")
    icon: Optional[str] = Field(None, description="图标")
    sort_order: int = Field(..., description="排序")
    status: int = Field(..., description="状态")
    created_at: Optional[datetime] = Field(None, description="创建时间")

    model_config = ConfigDict(from_attributes=True, extra="allow")


class MenuNode(BaseModel):
    """用户菜单节点"""
    id: str
    parent_id: Optional[str] = None
    name: str
    code: Optional[str] = None
    path: Optional[str] = None
    component: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0
    children: List["MenuNode"] = Field(default_factory=list)
