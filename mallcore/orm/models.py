"""后台数据模型

三类自引用层级表（部门、权限、商品分类）以及引用它们的角色、管理员、商品。
"""

from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CoreModel


# 角色-权限关联表
role_permission = Table(
    "role_permission",
    Base.metadata,
    Column("role_id", String(36), ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", String(36), ForeignKey("permission.id", ondelete="CASCADE"), primary_key=True),
)

# 管理员-角色关联表
admin_user_role = Table(
    "admin_user_role",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("admin_user.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", String(36), ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
)


class Department(CoreModel):
    """部门"""
    name: Mapped[str] = mapped_column(String(100), comment="部门名称")
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("department.id"), nullable=True, index=True, comment="上级部门"
    )
    leader_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, comment="负责人")
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, comment="联系电话")
    email: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, comment="邮箱")
    sort_order: Mapped[int] = mapped_column(Integer, default=0, comment="排序")
    status: Mapped[int] = mapped_column(Integer, default=1, comment="状态 1启用 0停用")


class Permission(CoreModel):
    """权限（菜单 / 按钮 / 接口）"""
    name: Mapped[str] = mapped_column(String(100), comment="权限名称")
    code: Mapped[str] = mapped_column(String(100), unique=True, comment="权限编码")
    type: Mapped[str] = mapped_column(String(20), default="MENU", comment="权限类型")
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("permission.id"), nullable=True, index=True, comment="上级权限"
    )
    path: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, comment="路由路径")
    component: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, comment="前端组件")
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, comment="图标")
    sort_order: Mapped[int] = mapped_column(Integer, default=0, comment="排序")
    status: Mapped[int] = mapped_column(Integer, default=1, comment="状态 1启用 0停用")


class ProductCategory(CoreModel):
    """商品分类"""
    name: Mapped[str] = mapped_column(String(100), comment="分类名称")
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("product_category.id"), nullable=True, index=True, comment="上级分类"
    )
    level: Mapped[int] = mapped_column(Integer, default=1, comment="层级，顶级为1")
    icon: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, comment="图标")
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, comment="描述")
    sort_order: Mapped[int] = mapped_column(Integer, default=0, comment="排序")
    status: Mapped[int] = mapped_column(Integer, default=1, comment="状态 1启用 0停用")


class Role(CoreModel):
    """角色"""
    name: Mapped[str] = mapped_column(String(100), comment="角色名称")
    code: Mapped[str] = mapped_column(String(100), unique=True, comment="角色编码")
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, comment="描述")
    sort_order: Mapped[int] = mapped_column(Integer, default=0, comment="排序")
    status: Mapped[int] = mapped_column(Integer, default=1, comment="状态 1启用 0停用")


class AdminUser(CoreModel):
    """后台管理员"""
    name: Mapped[str] = mapped_column(String(50), unique=True, comment="用户名")
    nickname: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, comment="昵称")
    department_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("department.id"), nullable=True, index=True, comment="所属部门"
    )
    sort_order: Mapped[int] = mapped_column(Integer, default=0, comment="排序")
    status: Mapped[int] = mapped_column(Integer, default=1, comment="状态 1启用 0停用")


class Product(CoreModel):
    """商品（仅保留分类引用相关字段）"""
    name: Mapped[str] = mapped_column(String(200), comment="商品名称")
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("product_category.id"), nullable=True, index=True, comment="所属分类"
    )
    sort_order: Mapped[int] = mapped_column(Integer, default=0, comment="排序")
    status: Mapped[int] = mapped_column(Integer, default=1, comment="状态 1上架 0下架")


__all__ = [
    "role_permission",
    "admin_user_role",
    "Department",
    "Permission",
    "ProductCategory",
    "Role",
    "AdminUser",
    "Product",
]
