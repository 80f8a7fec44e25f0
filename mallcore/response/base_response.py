"""统一响应结构

成功、警告、失败都使用同一个外壳:
    {"status": "success" | "warning" | "error", "message": ..., "msg_details": [...], "data": ...}
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


T = TypeVar('T')

DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'


class ResponseStatus(str, Enum):
    """业务状态，与 HTTP 状态码相互独立"""
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"   # 结果可用，msg_details 中带有提示，如孤立节点


class _Envelope(BaseModel):
    status: str = Field(default=ResponseStatus.SUCCESS.value, description="业务状态")
    message: str = Field(default="请求成功", description="提示信息")
    msg_details: List[str] = Field(default_factory=list, description="逐条补充说明")


class ItemResponse(_Envelope, Generic[T]):
    """OpenAPI 文档用的数据响应模型

    使用示例:
        @router.get("/get", response_model=ItemResponse[DepartmentResponse])
    """
    data: T = Field(description="数据")


class PageData(BaseModel, Generic[T]):
    """分页数据"""
    rows: List[T] = Field(description="数据列表")
    total_records: int = Field(description="总记录数")
    page: int = Field(description="当前页码")
    page_size: int = Field(description="每页数量")
    total_pages: int = Field(description="总页数")
    has_prev: bool = Field(description="是否有上一页")
    has_next: bool = Field(description="是否有下一页")


class PageResponse(_Envelope, Generic[T]):
    """分页接口的响应模型

    使用示例:
        @router.get("/page", response_model=PageResponse[RoleResponse])
    """
    data: PageData[T] = Field(description="分页数据")


class OkResponse(_Envelope):
    """删除、排序、授权等只返回简单结果的接口"""
    data: dict = Field(default_factory=dict, description="操作结果")


class ValidationErrorResponse(_Envelope):
    """替换 FastAPI 默认的 422 文档结构"""
    status: str = Field(default=ResponseStatus.ERROR.value, description="业务状态")
    message: str = Field(default="请求参数验证失败", description="提示信息")
    data: dict = Field(default_factory=dict, description="固定为空对象")
    error_code: str = Field(default="VALIDATION_ERROR", description="错误码")


class BaseResponse:

    @staticmethod
    def _serialize_data(data: Any, _is_top_level: bool = True) -> Any:
        """转换为可 JSON 编码的结构

        顶层 None 输出为 {}，嵌套的 None 保留；datetime 按 DATETIME_FORMAT 格式化；
        pydantic 模型和带 to_dict() 的对象先转为字典再递归。
        """
        if data is None:
            return {} if _is_top_level else None
        if isinstance(data, BaseModel):
            data = data.model_dump()
        elif callable(getattr(data, 'to_dict', None)):
            data = data.to_dict()

        if isinstance(data, dict):
            return {key: BaseResponse._serialize_data(value, False) for key, value in data.items()}
        if isinstance(data, (list, tuple)):
            return [BaseResponse._serialize_data(value, False) for value in data]
        if isinstance(data, datetime):
            return data.strftime(DATETIME_FORMAT)
        if isinstance(data, Enum):
            return data.value
        return data

    @staticmethod
    def build(
        message: str,
        data: Any = None,
        msg_details: Optional[List[str]] = None,
        status_code: int = status.HTTP_200_OK,
        response_status: ResponseStatus = ResponseStatus.SUCCESS,
    ) -> JSONResponse:
        content = _Envelope(
            status=response_status.value,
            message=message,
            msg_details=msg_details or [],
        ).model_dump()
        content["data"] = BaseResponse._serialize_data(data)
        return JSONResponse(status_code=status_code, content=content)


class Resp:
    """接口返回快捷方法

    使用示例:
        return Resp.OK(data=tree, message="获取部门树成功")
        return Resp.Warning(data=tree, message="存在孤立节点", msg_details=view.warnings)
    """

    @staticmethod
    def OK(data: Any = None, message: str = "请求成功") -> JSONResponse:
        return BaseResponse.build(message, data)

    @staticmethod
    def Warning(message: str = "操作成功，但有警告", data: Any = None, msg_details: Optional[List[str]] = None) -> JSONResponse:
        """HTTP 200，status 为 warning"""
        return BaseResponse.build(message, data, msg_details, response_status=ResponseStatus.WARNING)

    @staticmethod
    def Error(status_code: int, message: str, msg_details: Optional[List[str]] = None) -> JSONResponse:
        return BaseResponse.build(message, None, msg_details, status_code, ResponseStatus.ERROR)

    @staticmethod
    def BadRequest(message: str = "请求参数错误", msg_details: Optional[List[str]] = None) -> JSONResponse:
        return Resp.Error(status.HTTP_400_BAD_REQUEST, message, msg_details)

    @staticmethod
    def NotFound(message: str = "资源不存在", msg_details: Optional[List[str]] = None) -> JSONResponse:
        return Resp.Error(status.HTTP_404_NOT_FOUND, message, msg_details)

    @staticmethod
    def Conflict(message: str = "资源冲突", msg_details: Optional[List[str]] = None) -> JSONResponse:
        return Resp.Error(status.HTTP_409_CONFLICT, message, msg_details)
