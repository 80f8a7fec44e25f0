"""
应用工厂

使用示例:
    from mallcore.app import create_app
    from mallcore.config import AppSettings, load_yaml_config

    settings = load_yaml_config("config/settings.yaml", AppSettings)
    app = create_app(settings)

    # uvicorn "mallcore.app:create_app" --factory
"""

from typing import Optional

from fastapi import FastAPI

from mallcore.api import create_api_router
from mallcore.config import AppSettings
from mallcore.exceptions import register_exception_handlers
from mallcore.log import get_logger, setup_root_logger
from mallcore.middleware import RequestIDMiddleware
from mallcore.orm import init_database
from mallcore.response import Resp
from mallcore.version import __version__

logger = get_logger()


def create_app(settings: Optional[AppSettings] = None, configure_logging: bool = True) -> FastAPI:
    """创建 FastAPI 应用

    Args:
        settings: 应用配置，默认从环境变量读取
        configure_logging: 是否配置根日志器（测试中通常关闭）
    """
    settings = settings or AppSettings()

    if configure_logging:
        setup_root_logger(config=settings.logging)

    init_database(config=settings.database)

    app = FastAPI(
        title=settings.app_name,
        description="商城后台层级数据服务：部门、权限、商品分类",
        version=__version__,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.debug = settings.debug

    register_exception_handlers(app)
    app.add_middleware(RequestIDMiddleware)
    app.include_router(create_api_router(), prefix=settings.api_prefix)

    @app.get("/health", summary="健康检查")
    async def health_check():
        return Resp.OK(data={"status": "healthy", "version": __version__})

    logger.info(f"{settings.app_name} 启动完成，接口前缀: {settings.api_prefix}")
    return app
