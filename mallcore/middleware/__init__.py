"""中间件模块

- RequestIDMiddleware: 请求ID生成
"""

from .request_id import RequestIDMiddleware, get_request_id

__all__ = [
    "RequestIDMiddleware",
    "get_request_id",
]
