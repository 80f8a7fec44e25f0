"""
部门 API
"""

from fastapi import APIRouter

from mallcore.schemas import DepartmentCreate, DepartmentResponse, DepartmentTreeNode, DepartmentUpdate

from .deps import get_department_service
from .tree_api import add_tree_routes


def create_department_router() -> APIRouter:
    """创建部门路由，路由列表见 add_tree_routes"""
    router = APIRouter()
    return add_tree_routes(
        router,
        get_department_service,
        "部门",
        DepartmentCreate,
        DepartmentUpdate,
        DepartmentResponse,
        DepartmentTreeNode,
    )
