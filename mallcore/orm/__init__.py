"""ORM 模块

- 模型: Department, Permission, ProductCategory, Role, AdminUser, Product
- 会话: db_manager, init_database, get_db, db_session_scope
- 存储: SqlAlchemyTreeStore（TreeStore 协议的数据库实现）

使用示例:
    from mallcore.orm import init_database, db_session_scope, SqlAlchemyTreeStore

    init_database("sqlite:///./mall.db")
    with db_session_scope() as session:
        store = SqlAlchemyTreeStore(session)
"""

from .base import Base, CoreModel, generate_id, to_snake_case
from .models import (
    role_permission,
    admin_user_role,
    Department,
    Permission,
    ProductCategory,
    Role,
    AdminUser,
    Product,
)
from .db_session import (
    DatabaseManager,
    engine_options,
    db_manager,
    init_database,
    get_engine,
    get_db,
    db_session_scope,
)
from .tree_store import MODELS, to_record, SqlAlchemyTreeStore

__all__ = [
    "Base",
    "CoreModel",
    "generate_id",
    "to_snake_case",
    "role_permission",
    "admin_user_role",
    "Department",
    "Permission",
    "ProductCategory",
    "Role",
    "AdminUser",
    "Product",
    "DatabaseManager",
    "engine_options",
    "db_manager",
    "init_database",
    "get_engine",
    "get_db",
    "db_session_scope",
    "MODELS",
    "to_record",
    "SqlAlchemyTreeStore",
]
