"""全局异常处理器

所有错误都以统一结构返回:
    {"status": "error", "message": ..., "msg_details": [...], "data": {}, "error_code": ...}

使用示例:
    from mallcore.exceptions import register_exception_handlers

    register_exception_handlers(app)
"""

import traceback
from typing import Dict, List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mallcore.log import get_logger
from mallcore.response import ResponseStatus, ValidationErrorResponse
from mallcore.tree.exceptions import TreeError
from .exceptions import BusinessException, ErrorCode, translate_tree_error

logger = get_logger()

# 参数位置前缀不出现在字段名里
_LOCATION_PARTS = frozenset(("body", "query", "path", "header", "cookie"))


class _Ctx(dict):
    def __missing__(self, key):
        return "?"


class ValidationErrorTranslator:
    """pydantic 错误类型 -> 中文提示

    模板中的 {ge}、{max_length} 等占位符取自错误的 ctx。

    使用示例:
        ValidationErrorTranslator.add_messages({"value_error.phone": "手机号格式不正确"})
    """

    messages: Dict[str, str] = {
        "missing": "不能为空",
        "int_type": "应为整数",
        "int_parsing": "应为整数",
        "float_type": "应为数字",
        "float_parsing": "应为数字",
        "bool_type": "应为布尔值",
        "bool_parsing": "应为布尔值",
        "string_type": "应为字符串",
        "list_type": "应为列表",
        "dict_type": "应为对象",
        "json_invalid": "请求体不是合法的 JSON",
        "string_too_short": "至少 {min_length} 个字符",
        "string_too_long": "最多 {max_length} 个字符",
        "too_short": "至少 {min_length} 项",
        "too_long": "最多 {max_length} 项",
        "greater_than": "应大于 {gt}",
        "greater_than_equal": "应大于等于 {ge}",
        "less_than": "应小于 {lt}",
        "less_than_equal": "应小于等于 {le}",
        "literal_error": "可选值: {expected}",
        "enum": "可选值: {expected}",
    }

    @classmethod
    def add_messages(cls, messages: Dict[str, str]) -> None:
        cls.messages = {**cls.messages, **messages}

    @classmethod
    def translate(cls, error_type: str, error: dict) -> Optional[str]:
        """无对应模板时返回 None"""
        template = cls.messages.get(error_type)
        if template is None:
            return None
        return template.format_map(_Ctx(error.get("ctx") or {}))

    @classmethod
    def describe(cls, error: dict) -> str:
        """单条错误 -> "字段: 提示" """
        names = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_PARTS]
        field = ".".join(names) or "请求体"
        return f"{field}: {cls.translate(error['type'], error) or error.get('msg', '')}"


def _error_body(message: str, details: Optional[List[str]] = None, error_code: Optional[str] = None) -> dict:
    body = {
        "status": ResponseStatus.ERROR.value,
        "message": message,
        "msg_details": list(details or []),
        "data": {},
    }
    if error_code:
        body["error_code"] = error_code
    return body


def _request_context(request: Request) -> dict:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
    }


def _debug_enabled(request: Request) -> bool:
    return bool(getattr(request.app.state, "debug", False))


async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
    """BusinessException 及其子类"""
    code = exc.code.value if isinstance(exc.code, ErrorCode) else str(exc.code)
    logger.warning(f"业务异常 [{code}] {exc.message}", extra=_request_context(request))

    body = _error_body(exc.message, exc.details, code)
    if exc.extra and _debug_enabled(request):
        body["debug_info"] = {key: str(value) for key, value in exc.extra.items()}
    return JSONResponse(status_code=exc.status_code, content=body)


async def tree_exception_handler(request: Request, exc: TreeError) -> JSONResponse:
    """服务层未翻译的树结构异常，按默认映射处理"""
    return await business_exception_handler(request, translate_tree_error(exc))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [ValidationErrorTranslator.describe(error) for error in exc.errors()]
    logger.warning(f"参数校验失败: {details}", extra=_request_context(request))
    return JSONResponse(
        status_code=422,
        content=_error_body("请求参数验证失败", details, ErrorCode.VALIDATION_ERROR.value),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    level = "error" if exc.status_code >= 500 else "info"
    getattr(logger, level)(f"HTTP {exc.status_code}: {exc.detail}", extra=_request_context(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), error_code=f"HTTP_{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


async def database_exception_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """数据库不可用 -> 503"""
    logger.error(f"数据库异常: {exc}", extra=_request_context(request))
    return JSONResponse(
        status_code=503,
        content=_error_body("数据库暂时不可用", error_code=ErrorCode.DATABASE_ERROR.value),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底处理，只在调试模式下返回异常信息"""
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"未处理异常 {type(exc).__name__}: {exc}\n{stack}", extra=_request_context(request))

    details = [f"{type(exc).__name__}: {exc}"] if _debug_enabled(request) else []
    return JSONResponse(
        status_code=500,
        content=_error_body("服务器内部错误", details, ErrorCode.INTERNAL_SERVER_ERROR.value),
    )


_HANDLERS = (
    (BusinessException, business_exception_handler),
    (TreeError, tree_exception_handler),
    (RequestValidationError, validation_exception_handler),
    (StarletteHTTPException, http_exception_handler),
    (OperationalError, database_exception_handler),
    (Exception, general_exception_handler),
)


def register_exception_handlers(app) -> None:
    """注册全部异常处理器，并用统一结构覆盖 OpenAPI 中的 422 响应"""
    for exc_class, handler in _HANDLERS:
        app.add_exception_handler(exc_class, handler)
    app.router.responses[422] = {"description": "参数校验失败", "model": ValidationErrorResponse}
