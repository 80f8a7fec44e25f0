"""
商品分类相关 Schema
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    """创建分类请求"""
    name: str = Field(..., min_length=1, max_length=100, description="分类名称")
    parent_id: Optional[str] = Field(None, description="上级分类ID")
    icon: Optional[str] = Field(None, max_length=200, description="图标")
    description: Optional[str] = Field(None, max_length=500, description="描述")
    sort_order: int = Field(0, ge=0, description="排序")
    status: int = Field(1, ge=0, le=1, description="状态 1启用 0停用")


class CategoryUpdate(BaseModel):
    """更新分类请求"""
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="分类名称")
    parent_id: Optional[str] = Field(None, description="上级分类ID")
    icon: Optional[str] = Field(None, max_length=200, description="图标")
    description: Optional[str] = Field(None, max_length=500, description="描述")
    sort_order: Optional[int] = Field(None, ge=0, description="排序")
    status: Optional[int] = Field(None, ge=0, le=1, description="状态")


class CategorySortItem(BaseModel):
    id: str = Field(..., description="分类ID")
    sort_order: int = Field(..., ge=0, description="排序")


class CategorySortRequest(BaseModel):
    """批量排序请求"""
    items: List[CategorySortItem] = Field(..., min_length=1, description="排序列表")


class CategoryResponse(BaseModel):
    """分类响应"""
    id: str = Field(..., description="分类ID")
    name: str = Field(..., description="分类名称")
    parent_id: Optional[str] = Field(None, description="上级分类ID")
    level: int = Field(..., description="层级，顶级为1")
    icon: Optional[str] = Field(None, description="图标")
    description: Optional[str] = Field(None, description="描述")
    sort_order: int = Field(..., description="排序")
    status: int = Field(..., description="状态")
    created_at: Optional[datetime] = Field(None, description="创建时间")

    model_config = ConfigDict(from_attributes=True, extra="allow")
