"""通用请求 Schema 与分页结果"""

import math
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


class MoveRequest(BaseModel):
    """移动节点请求，parent_id 为空表示移动到根级"""
    parent_id: Optional[str] = Field(None, description="新的父节点ID")
    sort_order: Optional[int] = Field(None, ge=0, description="移动后的排序")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "parent_id": "7c1f0e0a-3d4b-4f6e-9a51-2a8e0c9d1b11",
            "sort_order": 1
        }
    })


# 统一分页结果


@dataclass
class Page(Generic[T]):
    rows: List[T]  # 当前页数据
    total_records: int  # 总条数
    page: int  # 当前页码
    page_size: int  # 每页条数
    total_pages: int  # 总页数

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self):
        return {
            "rows": self.rows,
            "total_records": self.total_records,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def paginate(items: Sequence[T], page: int = 1, page_size: int = 10) -> Page[T]:
    """对已排序的列表切片分页

    页码超出范围时返回空 rows，总数和总页数仍按全部数据计算。

    Raises:
        ValueError: page 或 page_size 小于 1
    """
    if page < 1 or page_size < 1:
        raise ValueError("page 和 page_size 必须大于 0")
    total = len(items)
    start = (page - 1) * page_size
    return Page(
        rows=list(items[start:start + page_size]),
        total_records=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )
