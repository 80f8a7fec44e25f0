"""请求ID

纯 ASGI 中间件。请求ID保存在 request.state.request_id 和 ContextVar 中，
异常处理器记录日志时附带该ID，响应头 X-Request-ID 原样返回。
"""
import uuid
from contextvars import ContextVar
from typing import Optional

HEADER_NAME = b"x-request-id"

_current_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestIDMiddleware:
    """沿用客户端传入的 X-Request-ID，没有时生成 32 位十六进制ID

    使用示例:
        app.add_middleware(RequestIDMiddleware)
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        incoming = dict(scope.get("headers") or []).get(HEADER_NAME)
        request_id = incoming.decode("latin-1") if incoming else uuid.uuid4().hex
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message):
            if message["type"] == "http.response.start":
                headers = [*message.get("headers", []), (HEADER_NAME, request_id.encode("latin-1"))]
                message = {**message, "headers": headers}
            await send(message)

        token = _current_request_id.set(request_id)
        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            _current_request_id.reset(token)


def get_request_id() -> Optional[str]:
    """当前请求的ID，请求上下文之外为 None"""
    return _current_request_id.get()
