"""
部门相关 Schema
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DepartmentCreate(BaseModel):
    """创建部门请求"""
    name: str = Field(..., min_length=1, max_length=100, description="部门名称")
    parent_id: Optional[str] = Field(None, description="上级部门ID，为空表示顶级部门")
    leader_id: Optional[str] = Field(None, description="负责人ID")
    phone: Optional[str] = Field(None, max_length=20, description="联系电话")
    email: Optional[str] = Field(None, max_length=100, description="邮箱")
    sort_order: int = Field(0, ge=0, description="排序")
    status: int = Field(1, ge=0, le=1, description="状态 1启用 0停用")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "技术部",
            "parent_id": None,
            "phone": "010-12345678",
            "sort_order": 1
        }
    })


class DepartmentUpdate(BaseModel):
    """更新部门请求（只更新提交的字段）"""
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="部门名称")
    parent_id: Optional[str] = Field(None, description="上级部门ID，显式传 null 表示移动到顶级")
    leader_id: Optional[str] = Field(None, description="负责人ID")
    phone: Optional[str] = Field(None, max_length=20, description="联系电话")
    email: Optional[str] = Field(None, max_length=100, description="邮箱")
    sort_order: Optional[int] = Field(None, ge=0, description="排序")
    status: Optional[int] = Field(None, ge=0, le=1, description="状态")


class DepartmentResponse(BaseModel):
    """部门响应"""
    id: str = Field(..., description="部门ID")
    name: str = Field(..., description="部门名称")
    parent_id: Optional[str] = Field(None, description="上级部门ID")
    leader_id: Optional[str] = Field(None, description="负责人ID")
    phone: Optional[str] = Field(None, description="联系电话")
    email: Optional[str] = Field(None, description="邮箱")
    sort_order: int = Field(..., description="排序")
    status: int = Field(..., description="状态")
    created_at: Optional[datetime] = Field(None, description="创建时间")

    model_config = ConfigDict(from_attributes=True, extra="allow")


class DepartmentTreeNode(DepartmentResponse):
    """部门树节点"""
    depth: int = Field(0, description="深度，根节点为0")
    full_path: str = Field("", description="完整路径")
    is_leaf: bool = Field(True, description="是否叶子节点")
    user_count: int = Field(0, description="部门员工数")
    children: List["DepartmentTreeNode"] = Field(default_factory=list, description="子部门")
