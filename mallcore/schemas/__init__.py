"""请求 / 响应 Schema"""

from .common import MoveRequest, Page, paginate
from .department import DepartmentCreate, DepartmentUpdate, DepartmentResponse, DepartmentTreeNode
from .permission import PermissionType, PermissionCreate, PermissionUpdate, PermissionResponse, MenuNode
from .category import (
    CategoryCreate,
    CategoryUpdate,
    CategorySortItem,
    CategorySortRequest,
    CategoryResponse,
)
from .role import RoleCreate, RoleUpdate, AssignPermissionsRequest, RoleResponse

__all__ = [
    "MoveRequest",
    "Page",
    "paginate",
    "DepartmentCreate",
    "DepartmentUpdate",
    "DepartmentResponse",
    "DepartmentTreeNode",
    "PermissionType",
    "PermissionCreate",
    "PermissionUpdate",
    "PermissionResponse",
    "MenuNode",
    "CategoryCreate",
    "CategoryUpdate",
    "CategorySortItem",
    "CategorySortRequest",
    "CategoryResponse",
    "RoleCreate",
    "RoleUpdate",
    "AssignPermissionsRequest",
    "RoleResponse",
]
