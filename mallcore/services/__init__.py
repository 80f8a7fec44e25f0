"""服务层

每个服务通过构造函数接收 TreeStore 和 AppSettings，不持有全局数据库连接。

使用示例:
    from mallcore.orm import SqlAlchemyTreeStore
    from mallcore.services import DepartmentService

    service = DepartmentService(SqlAlchemyTreeStore(session), settings)
"""

from .tree_service import TreeView, BaseTreeService
from .dept_service import DepartmentService
from .permission_service import PermissionService
from .category_service import ProductCategoryService
from .role_service import RoleService

__all__ = [
    "TreeView",
    "BaseTreeService",
    "DepartmentService",
    "PermissionService",
    "ProductCategoryService",
    "RoleService",
]
