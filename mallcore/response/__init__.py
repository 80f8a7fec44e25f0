"""统一响应模块

所有接口返回 {"status", "message", "msg_details", "data"} 结构。
"""

from .base_response import (
    ResponseStatus,
    ItemResponse,
    PageData,
    PageResponse,
    OkResponse,
    ValidationErrorResponse,
    BaseResponse,
    Resp,
)

__all__ = [
    "ResponseStatus",
    "ItemResponse",
    "PageData",
    "PageResponse",
    "OkResponse",
    "ValidationErrorResponse",
    "BaseResponse",
    "Resp",
]
