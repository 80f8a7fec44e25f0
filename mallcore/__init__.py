"""
mallcore - 商城后台层级数据核心库

- tree: 通用层级树（构建、导航、变更校验、存储协议）
- services: 部门、权限、商品分类、角色服务
- api: FastAPI 路由
- config / log / exceptions / response / orm: 基础设施

使用示例:
    from mallcore import create_app, AppSettings

    app = create_app(AppSettings())
"""

from mallcore.version import __version__
from mallcore.config import AppSettings, load_yaml_config
from mallcore.log import get_logger, setup_logger, setup_root_logger
from mallcore.exceptions import Err, ErrorCode, BusinessException
from mallcore.response import Resp
from mallcore.app import create_app

__all__ = [
    "__version__",
    "AppSettings",
    "load_yaml_config",
    "get_logger",
    "setup_logger",
    "setup_root_logger",
    "Err",
    "ErrorCode",
    "BusinessException",
    "Resp",
    "create_app",
]
