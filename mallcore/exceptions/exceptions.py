"""业务异常

服务层只抛出 BusinessException 及其子类，由全局处理器转换为统一错误响应。
每个子类通过类属性固定 HTTP 状态码、默认提示和默认错误码。

使用示例:
    from mallcore.exceptions import Err, ErrorCode

    raise Err.conflict("存在子部门，无法删除", code=ErrorCode.HAS_CHILDREN)
"""

import copy
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from fastapi import status

from mallcore.tree.exceptions import (
    CycleDetectedError,
    CycleError,
    DepthExceededError,
    DetachedNodeError,
    DuplicateIdError,
    HasChildrenError,
    InUseError,
    OrphanRecordError,
    SelfParentError,
    TreeError,
)


class ErrorCode(str, Enum):
    """响应中 error_code 字段的取值"""

    BUSINESS_ERROR = "BUSINESS_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # 记录不存在
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    PARENT_NOT_FOUND = "PARENT_NOT_FOUND"
    DEPARTMENT_NOT_FOUND = "DEPARTMENT_NOT_FOUND"
    PERMISSION_NOT_FOUND = "PERMISSION_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # 层级结构
    SELF_PARENT = "SELF_PARENT"
    CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"
    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"
    HAS_CHILDREN = "HAS_CHILDREN"
    IN_USE = "IN_USE"
    TREE_CORRUPTED = "TREE_CORRUPTED"

    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    DATABASE_ERROR = "DATABASE_ERROR"


ErrorCodeType = Union[str, ErrorCode]


class BusinessException(Exception):
    """业务异常基类

    Args:
        message: 面向用户的提示
        code: 错误码，缺省时使用类上的 default_code
        status_code: HTTP 状态码，缺省时使用类上的 http_status
        details: 逐条补充说明，原样放入 msg_details
        **extra: 上下文信息，仅调试模式下返回给调用方
    """

    http_status: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "操作失败"
    default_code: ErrorCode = ErrorCode.BUSINESS_ERROR

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCodeType] = None,
        status_code: Optional[int] = None,
        details: Optional[List[str]] = None,
        **extra: Any,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.status_code = status_code or self.http_status
        self.details = list(details or [])
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in ("message", "code", "status_code")}
        data["details"] = copy.deepcopy(self.details)
        data["extra"] = copy.deepcopy(self.extra)
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, status_code={self.status_code})"


class ResourceNotFoundException(BusinessException):
    """记录不存在，如部门、角色或父节点"""

    http_status = status.HTTP_404_NOT_FOUND
    default_message = "资源不存在"
    default_code = ErrorCode.RESOURCE_NOT_FOUND


class ResourceConflictException(BusinessException):
    """与现有数据冲突: 编码重复、存在子节点、仍被引用"""

    http_status = status.HTTP_409_CONFLICT
    default_message = "资源冲突"
    default_code = ErrorCode.RESOURCE_CONFLICT


class ValidationException(BusinessException):
    """请求本身合法但违反业务规则，如自引用或超出层级"""

    http_status = 422
    default_message = "数据验证失败"
    default_code = ErrorCode.VALIDATION_ERROR


class Err:
    """按状态码创建异常

    使用示例:
        raise Err.not_found("部门不存在", code=ErrorCode.DEPARTMENT_NOT_FOUND)   # 404
        raise Err.conflict("权限编码已存在", code=ErrorCode.DUPLICATE_ENTRY)      # 409
        raise Err.invalid("分类层级不能超过3级", code=ErrorCode.DEPTH_EXCEEDED)   # 422
    """

    @staticmethod
    def not_found(message: Optional[str] = None, **kwargs) -> ResourceNotFoundException:
        return ResourceNotFoundException(message, **kwargs)

    @staticmethod
    def conflict(message: Optional[str] = None, **kwargs) -> ResourceConflictException:
        return ResourceConflictException(message, **kwargs)

    @staticmethod
    def invalid(message: Optional[str] = None, **kwargs) -> ValidationException:
        return ValidationException(message, **kwargs)


# 树结构异常 -> (业务异常类型, 错误码)
_TREE_ERROR_MAP = {
    SelfParentError: (ValidationException, ErrorCode.SELF_PARENT),
    CycleError: (ValidationException, ErrorCode.CIRCULAR_REFERENCE),
    DepthExceededError: (ValidationException, ErrorCode.DEPTH_EXCEEDED),
    HasChildrenError: (ResourceConflictException, ErrorCode.HAS_CHILDREN),
    InUseError: (ResourceConflictException, ErrorCode.IN_USE),
    DuplicateIdError: (ResourceConflictException, ErrorCode.DUPLICATE_ENTRY),
    OrphanRecordError: (ResourceConflictException, ErrorCode.TREE_CORRUPTED),
    CycleDetectedError: (ResourceConflictException, ErrorCode.TREE_CORRUPTED),
    DetachedNodeError: (ResourceConflictException, ErrorCode.TREE_CORRUPTED),
}


def translate_tree_error(exc: TreeError, message: Optional[str] = None) -> BusinessException:
    """树结构异常转换为业务异常

    未登记的 TreeError 子类按数据损坏处理（409）。message 为空时沿用异常自身的提示。

    使用示例:
        try:
            validate_new_parent(node, parent_id)
        except TreeError as exc:
            raise translate_tree_error(exc, "不能选择子部门作为父部门") from exc
    """
    exc_class, code = _TREE_ERROR_MAP.get(
        type(exc), (ResourceConflictException, ErrorCode.TREE_CORRUPTED)
    )
    return exc_class(
        message or exc.message,
        code=code,
        tree_error=exc.code,
        record_id=exc.record_id,
    )
