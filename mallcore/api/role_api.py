"""
角色 API

    GET  /list               - 角色列表
    GET  /page               - 分页角色列表
    GET  /get                - 角色详情（含权限ID）
    POST /create             - 创建角色
    POST /update             - 更新角色
    POST /delete             - 删除角色（有用户持有时拒绝）
    POST /assign-permissions - 覆盖角色权限
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from mallcore.response import ItemResponse, OkResponse, PageResponse, Resp
from mallcore.schemas import AssignPermissionsRequest, RoleCreate, RoleResponse, RoleUpdate
from mallcore.services import RoleService

from .deps import get_role_service


def create_role_router() -> APIRouter:
    """创建角色路由"""
    router = APIRouter()

    @router.get("/list", response_model=ItemResponse[List[RoleResponse]], summary="获取角色列表")
    async def list_roles(
        name: Optional[str] = Query(None, description="名称搜索"),
        code: Optional[str] = Query(None, description="编码搜索"),
        status: Optional[int] = Query(None, ge=0, le=1, description="按状态筛选"),
        service: RoleService = Depends(get_role_service),
    ):
        return Resp.OK(data=service.get_list(name=name, code=code, status=status), message="获取角色列表成功")

    @router.get("/page", response_model=PageResponse[RoleResponse], summary="分页获取角色列表")
    async def page_roles(
        name: Optional[str] = Query(None, description="名称搜索"),
        code: Optional[str] = Query(None, description="编码搜索"),
        status: Optional[int] = Query(None, ge=0, le=1, description="按状态筛选"),
        page: int = Query(1, ge=1, description="页码"),
        page_size: int = Query(10, ge=1, le=100, description="每页数量"),
        service: RoleService = Depends(get_role_service),
    ):
        result = service.get_page(page=page, page_size=page_size, name=name, code=code, status=status)
        return Resp.OK(data=result, message="获取角色列表成功")

    @router.get("/get", response_model=ItemResponse[RoleResponse], summary="获取角色详情")
    async def get_role(
        id: str = Query(..., description="角色ID"),
        service: RoleService = Depends(get_role_service),
    ):
        return Resp.OK(data=service.get(id), message="获取角色详情成功")

    @router.post("/create", response_model=ItemResponse[RoleResponse], summary="创建角色")
    async def create_role(
        data: RoleCreate,
        service: RoleService = Depends(get_role_service),
    ):
        return Resp.OK(data=service.create(**data.model_dump()), message="创建成功")

    @router.post("/update", response_model=ItemResponse[RoleResponse], summary="更新角色")
    async def update_role(
        data: RoleUpdate,
        id: str = Query(..., description="角色ID"),
        service: RoleService = Depends(get_role_service),
    ):
        return Resp.OK(data=service.update(id, **data.model_dump(exclude_unset=True)), message="更新成功")

    @router.post("/delete", response_model=OkResponse, summary="删除角色")
    async def delete_role(
        id: str = Query(..., description="角色ID"),
        service: RoleService = Depends(get_role_service),
    ):
        return Resp.OK(data=service.delete(id), message="删除成功")

    @router.post("/assign-permissions", response_model=OkResponse, summary="分配角色权限")
    async def assign_permissions(
        data: AssignPermissionsRequest,
        id: str = Query(..., description="角色ID"),
        service: RoleService = Depends(get_role_service),
    ):
        permission_ids = service.assign_permissions(id, data.permission_ids)
        return Resp.OK(data={"id": id, "permission_ids": permission_ids}, message="分配权限成功")

    return router
