"""
树形资源通用路由

部门、权限、商品分类共用的树接口。
使用动词风格路由，只使用 GET 和 POST 请求。
"""

from typing import Callable, List, Optional, Type

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from mallcore.response import ItemResponse, OkResponse, PageResponse, Resp
from mallcore.schemas import MoveRequest
from mallcore.services import BaseTreeService


def tree_response(view, message: str):
    """存在孤立节点时返回 warning 状态"""
    if view.orphans:
        return Resp.Warning(
            message=f"{message}，存在孤立节点",
            data=view.items,
            msg_details=view.warnings,
        )
    return Resp.OK(data=view.items, message=message)


def add_tree_routes(
    router: APIRouter,
    get_service: Callable[..., BaseTreeService],
    label: str,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
    tree_node_schema: Optional[Type[BaseModel]] = None,
    include_tree: bool = True,
) -> APIRouter:
    """注册通用树路由

    生成的路由:
        GET  /tree    - 获取树（name 模糊搜索保留祖先，status 过滤）
        GET  /list    - 获取扁平列表
        GET  /page    - 分页获取扁平列表
        GET  /get     - 获取详情（含深度、完整路径、子节点）
        GET  /descendants - 获取所有后代ID
        POST /create  - 创建
        POST /update  - 更新（parent_id 变化按移动校验）
        POST /move    - 移动
        POST /delete  - 删除（存在子节点或被引用时拒绝）

    include_tree=False 时不注册 /tree，由调用方提供带额外过滤条件的版本。
    """
    node_schema = tree_node_schema or response_schema

    if include_tree:
        @router.get(
            "/tree",
            response_model=ItemResponse[List[node_schema]],
            summary=f"获取{label}树",
        )
        async def get_tree(
            name: Optional[str] = Query(None, description="名称搜索"),
            status: Optional[int] = Query(None, ge=0, le=1, description="按状态筛选"),
            service: BaseTreeService = Depends(get_service),
        ):
            view = service.get_tree(name=name, status=status)
            return tree_response(view, f"获取{label}树成功")

    @router.get(
        "/list",
        response_model=ItemResponse[List[response_schema]],
        summary=f"获取{label}列表",
    )
    async def get_list(
        name: Optional[str] = Query(None, description="名称搜索"),
        status: Optional[int] = Query(None, ge=0, le=1, description="按状态筛选"),
        service: BaseTreeService = Depends(get_service),
    ):
        return Resp.OK(data=service.get_list(name=name, status=status), message=f"获取{label}列表成功")

    @router.get(
        "/page",
        response_model=PageResponse[response_schema],
        summary=f"分页获取{label}列表",
    )
    async def get_page(
        name: Optional[str] = Query(None, description="名称搜索"),
        status: Optional[int] = Query(None, ge=0, le=1, description="按状态筛选"),
        page: int = Query(1, ge=1, description="页码"),
        page_size: int = Query(10, ge=1, le=100, description="每页数量"),
        service: BaseTreeService = Depends(get_service),
    ):
        result = service.get_page(page=page, page_size=page_size, name=name, status=status)
        return Resp.OK(data=result, message=f"获取{label}列表成功")

    @router.get(
        "/get",
        response_model=ItemResponse[response_schema],
        summary=f"获取{label}详情",
    )
    async def get_detail(
        id: str = Query(..., description=f"{label}ID"),
        service: BaseTreeService = Depends(get_service),
    ):
        return Resp.OK(data=service.get(id), message=f"获取{label}详情成功")

    @router.get(
        "/descendants",
        response_model=ItemResponse[List[str]],
        summary=f"获取{label}的所有后代ID",
    )
    async def get_descendants(
        id: str = Query(..., description=f"{label}ID"),
        service: BaseTreeService = Depends(get_service),
    ):
        return Resp.OK(data=service.get_descendant_ids(id))

    @router.post(
        "/create",
        response_model=ItemResponse[response_schema],
        summary=f"创建{label}",
    )
    async def create(
        data: create_schema,
        service: BaseTreeService = Depends(get_service),
    ):
        return Resp.OK(data=service.create(**data.model_dump()), message="创建成功")

    @router.post(
        "/update",
        response_model=ItemResponse[response_schema],
        summary=f"更新{label}",
    )
    async def update(
        data: update_schema,
        id: str = Query(..., description=f"{label}ID"),
        service: BaseTreeService = Depends(get_service),
    ):
        # 只更新提交的字段；显式提交 parent_id=null 表示移动到根级
        return Resp.OK(data=service.update(id, **data.model_dump(exclude_unset=True)), message="更新成功")

    @router.post(
        "/move",
        response_model=ItemResponse[response_schema],
        summary=f"移动{label}",
    )
    async def move(
        data: MoveRequest = Body(...),
        id: str = Query(..., description=f"{label}ID"),
        service: BaseTreeService = Depends(get_service),
    ):
        return Resp.OK(data=service.move(id, data.parent_id, data.sort_order), message="移动成功")

    @router.post(
        "/delete",
        response_model=OkResponse,
        summary=f"删除{label}",
    )
    async def delete(
        id: str = Query(..., description=f"{label}ID"),
        service: BaseTreeService = Depends(get_service),
    ):
        return Resp.OK(data=service.delete(id), message="删除成功")

    return router
