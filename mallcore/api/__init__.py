"""HTTP 接口

使用示例:
    from mallcore.api import create_api_router

    app.include_router(create_api_router(), prefix="/api/v1")
"""

from fastapi import APIRouter

from .department_api import create_department_router
from .permission_api import create_permission_router
from .category_api import create_category_router
from .role_api import create_role_router


def create_api_router() -> APIRouter:
    """汇总所有业务路由"""
    router = APIRouter()
    router.include_router(create_department_router(), prefix="/departments", tags=["部门管理"])
    router.include_router(create_permission_router(), prefix="/permissions", tags=["权限管理"])
    router.include_router(create_category_router(), prefix="/categories", tags=["商品分类"])
    router.include_router(create_role_router(), prefix="/roles", tags=["角色管理"])
    return router


__all__ = [
    "create_api_router",
    "create_department_router",
    "create_permission_router",
    "create_category_router",
    "create_role_router",
]
