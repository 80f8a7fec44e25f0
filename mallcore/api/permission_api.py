"""
权限 API

除通用树路由外:
    GET /user-menus - 用户菜单树
    GET /user-codes - 用户权限编码
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from mallcore.response import ItemResponse, Resp
from mallcore.schemas import MenuNode, PermissionCreate, PermissionResponse, PermissionType, PermissionUpdate
from mallcore.services import PermissionService

from .deps import get_permission_service
from .tree_api import add_tree_routes, tree_response


def create_permission_router() -> APIRouter:
    """创建权限路由"""
    router = APIRouter()

    # 权限树额外支持按类型过滤
    @router.get(
        "/tree",
        response_model=ItemResponse[List[PermissionResponse]],
        summary="获取权限树",
    )
    async def get_permission_tree(
        name: Optional[str] = Query(None, description="名称搜索"),
        status: Optional[int] = Query(None, ge=0, le=1, description="按状态筛选"),
        type: Optional[PermissionType] = Query(None, description="按类型筛选"),
        service: PermissionService = Depends(get_permission_service),
    ):
        view = service.get_tree(name=name, status=status, type=type)
        return tree_response(view, "获取权限树成功")

    @router.get(
        "/user-menus",
        response_model=ItemResponse[List[MenuNode]],
        summary="获取用户菜单树",
    )
    async def get_user_menus(
        user_id: str = Query(..., description="用户ID"),
        service: PermissionService = Depends(get_permission_service),
    ):
        return Resp.OK(data=service.get_user_menu_tree(user_id), message="获取用户菜单成功")

    @router.get(
        "/user-codes",
        response_model=ItemResponse[List[str]],
        summary="获取用户权限编码",
    )
    async def get_user_codes(
        user_id: str = Query(..., description="用户ID"),
        service: PermissionService = Depends(get_permission_service),
    ):
        return Resp.OK(data=service.get_user_permission_codes(user_id), message="获取用户权限编码成功")

    return add_tree_routes(
        router,
        get_permission_service,
        "权限",
        PermissionCreate,
        PermissionUpdate,
        PermissionResponse,
        include_tree=False,
    )
