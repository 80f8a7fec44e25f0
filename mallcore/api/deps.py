"""
接口依赖

每个请求: get_db -> SqlAlchemyTreeStore -> 服务实例
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from mallcore.config import AppSettings
from mallcore.orm import SqlAlchemyTreeStore, get_db
from mallcore.services import (
    DepartmentService,
    PermissionService,
    ProductCategoryService,
    RoleService,
)


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_store(db: Session = Depends(get_db)) -> SqlAlchemyTreeStore:
    return SqlAlchemyTreeStore(db)


def get_department_service(
    store: SqlAlchemyTreeStore = Depends(get_store),
    settings: AppSettings = Depends(get_settings),
) -> DepartmentService:
    return DepartmentService(store, settings)


def get_permission_service(
    store: SqlAlchemyTreeStore = Depends(get_store),
    settings: AppSettings = Depends(get_settings),
) -> PermissionService:
    return PermissionService(store, settings)


def get_category_service(
    store: SqlAlchemyTreeStore = Depends(get_store),
    settings: AppSettings = Depends(get_settings),
) -> ProductCategoryService:
    return ProductCategoryService(store, settings)


def get_role_service(
    store: SqlAlchemyTreeStore = Depends(get_store),
    settings: AppSettings = Depends(get_settings),
) -> RoleService:
    return RoleService(store, settings)
