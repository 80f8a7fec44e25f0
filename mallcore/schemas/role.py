"""
角色相关 Schema
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RoleCreate(BaseModel):
    """创建角色请求"""
    name: str = Field(..., min_length=1, max_length=100, description="角色名称")
    code: str = Field(..., min_length=1, max_length=100, description="角色编码")
    description: Optional[str] = Field(None, max_length=500, description="描述")
    sort_order: int = Field(0, ge=0, description="排序")
    status: int = Field(1, ge=0, le=1, description="状态 1启用 0停用")
    permission_ids: List[str] = Field(default_factory=list, description="权限ID列表")


class RoleUpdate(BaseModel):
    """更新角色请求，permission_ids 不传时不修改权限"""
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="角色名称")
    code: Optional[str] = Field(None, min_length=1, max_length=100, description="角色编码")
    description: Optional[str] = Field(None, max_length=500, description="描述")
    sort_order: Optional[int] = Field(None, ge=0, description="排序")
    status: Optional[int] = Field(None, ge=0, le=1, description="状态")
    permission_ids: Optional[List[str]] = Field(None, description="权限ID列表")


class AssignPermissionsRequest(BaseModel):
    """角色分配权限请求（覆盖）"""
    permission_ids: List[str] = Field(default_factory=list, description="权限ID列表")


class RoleResponse(BaseModel):
    """角色响应"""
    id: str = Field(..., description="角色ID")
    name: str = Field(..., description="角色名称")
    code: str = Field(..., description="角色编码")
    description: Optional[str] = Field(None, description="描述")
    sort_order: int = Field(..., description="排序")
    status: int = Field(..., description="状态")
    permission_ids: List[str] = Field(default_factory=list, description="权限ID列表")
    user_count: int = Field(0, description="持有该角色的用户数")
    created_at: Optional[datetime] = Field(None, description="创建时间")

    model_config = ConfigDict(from_attributes=True, extra="allow")
