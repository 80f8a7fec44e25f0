"""异常模块

使用示例:
    from mallcore.exceptions import Err, ErrorCode, register_exception_handlers

    raise Err.not_found("部门不存在", code=ErrorCode.DEPARTMENT_NOT_FOUND)
"""

from .exceptions import (
    ErrorCode,
    BusinessException,
    ResourceNotFoundException,
    ResourceConflictException,
    ValidationException,
    Err,
    translate_tree_error,
)

from .handlers import (
    ValidationErrorTranslator,
    business_exception_handler,
    tree_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    database_exception_handler,
    general_exception_handler,
    register_exception_handlers,
)

__all__ = [
    "ErrorCode",
    "BusinessException",
    "ResourceNotFoundException",
    "ResourceConflictException",
    "ValidationException",
    "Err",
    "translate_tree_error",
    "ValidationErrorTranslator",
    "business_exception_handler",
    "tree_exception_handler",
    "validation_exception_handler",
    "http_exception_handler",
    "database_exception_handler",
    "general_exception_handler",
    "register_exception_handlers",
]
