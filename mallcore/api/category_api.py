"""
商品分类 API

除通用树路由外:
    GET  /children - 直接子分类（parent_id 为空返回根分类）
    POST /sort     - 批量更新排序
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from mallcore.response import ItemResponse, OkResponse, Resp
from mallcore.schemas import CategoryCreate, CategoryResponse, CategorySortRequest, CategoryUpdate
from mallcore.services import ProductCategoryService

from .deps import get_category_service
from .tree_api import add_tree_routes


def create_category_router() -> APIRouter:
    """创建商品分类路由"""
    router = APIRouter()

    @router.get(
        "/children",
        response_model=ItemResponse[List[CategoryResponse]],
        summary="获取子分类",
    )
    async def get_children(
        parent_id: Optional[str] = Query(None, description="父分类ID，为空返回根分类"),
        status: Optional[int] = Query(None, ge=0, le=1, description="按状态筛选"),
        service: ProductCategoryService = Depends(get_category_service),
    ):
        return Resp.OK(data=service.get_children(parent_id, status=status), message="获取子分类成功")

    @router.post(
        "/sort",
        response_model=OkResponse,
        summary="批量更新分类排序",
    )
    async def update_sort(
        data: CategorySortRequest,
        service: ProductCategoryService = Depends(get_category_service),
    ):
        count = service.update_sort([item.model_dump() for item in data.items])
        return Resp.OK(data={"count": count}, message="排序更新成功")

    return add_tree_routes(
        router,
        get_category_service,
        "商品分类",
        CategoryCreate,
        CategoryUpdate,
        CategoryResponse,
    )
