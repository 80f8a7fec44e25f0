"""SQLAlchemy 扁平记录存储

TreeStore 协议的数据库实现。每个实例绑定一个 Session（通常一个请求一个）。

使用示例:
    from mallcore.orm import SqlAlchemyTreeStore, db_session_scope

    with db_session_scope() as session:
        store = SqlAlchemyTreeStore(session)
        records = store.fetch_all(EntityKind.DEPARTMENT)
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Type

from sqlalchemy import delete, func, insert, inspect, select
from sqlalchemy.orm import Session

from mallcore.log import get_logger
from mallcore.tree import EntityKind, RecordFilter, TreeRecord

from .base import CoreModel
from .models import (
    AdminUser,
    Department,
    Permission,
    Product,
    ProductCategory,
    Role,
    admin_user_role,
    role_permission,
)

logger = get_logger()


MODELS: Dict[EntityKind, Type[CoreModel]] = {
    EntityKind.DEPARTMENT: Department,
    EntityKind.PERMISSION: Permission,
    EntityKind.CATEGORY: ProductCategory,
    EntityKind.ROLE: Role,
    EntityKind.USER: AdminUser,
    EntityKind.PRODUCT: Product,
}

# 外键形式的链接: (owner, target) -> owner 模型上的外键属性
_FK_LINKS = {
    (EntityKind.USER, EntityKind.DEPARTMENT): "department_id",
    (EntityKind.PRODUCT, EntityKind.CATEGORY): "category_id",
}

# 关联表形式的链接: (owner, target) -> (关联表, owner 列, target 列)
_TABLE_LINKS = {
    (EntityKind.ROLE, EntityKind.PERMISSION): (role_permission, "role_id", "permission_id"),
    (EntityKind.USER, EntityKind.ROLE): (admin_user_role, "user_id", "role_id"),
}

_FIXED_FIELDS = ("id", "parent_id", "sort_order", "status", "name", "created_at")


def _columns(model: Type[CoreModel]) -> List[str]:
    return [attr.key for attr in inspect(model).column_attrs]


def to_record(obj: CoreModel) -> TreeRecord:
    """ORM 对象转换为 TreeRecord，非固定字段放入 payload"""
    payload = {
        key: getattr(obj, key)
        for key in _columns(type(obj))
        if key not in _FIXED_FIELDS and key != "updated_at"
    }
    return TreeRecord(
        id=obj.id,
        parent_id=getattr(obj, "parent_id", None),
        sort_order=obj.sort_order or 0,
        status=obj.status if obj.status is not None else 1,
        name=obj.name or "",
        payload=payload,
        created_at=obj.created_at,
    )


class SqlAlchemyTreeStore:
    """基于 SQLAlchemy Session 的记录存储"""

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    # ==================== 读取 ====================

    def _apply_filters(self, stmt, model, filters: Optional[RecordFilter]):
        if filters is None:
            return stmt
        if filters.name:
            stmt = stmt.where(model.name.contains(filters.name))
        if filters.code and hasattr(model, "code"):
            stmt = stmt.where(model.code.contains(filters.code))
        if filters.status is not None:
            stmt = stmt.where(model.status == int(filters.status))
        if filters.type is not None and hasattr(model, "type"):
            stmt = stmt.where(model.type == filters.type)
        if filters.granted_to_user is not None:
            granted = (
                select(role_permission.c.permission_id)
                .join(admin_user_role, admin_user_role.c.role_id == role_permission.c.role_id)
                .where(admin_user_role.c.user_id == filters.granted_to_user)
            )
            stmt = stmt.where(model.id.in_(granted))
        return stmt

    def fetch_all(
        self,
        kind: EntityKind,
        filters: Optional[RecordFilter] = None,
        for_update: bool = False,
    ) -> List[TreeRecord]:
        model = MODELS[kind]
        stmt = select(model).order_by(model.sort_order, model.created_at)
        stmt = self._apply_filters(stmt, model, filters)
        if for_update:
            stmt = stmt.with_for_update()
        return [to_record(obj) for obj in self.session.scalars(stmt)]

    def get(self, kind: EntityKind, record_id: str, for_update: bool = False) -> Optional[TreeRecord]:
        model = MODELS[kind]
        stmt = select(model).where(model.id == record_id)
        if for_update:
            stmt = stmt.with_for_update()
        obj = self.session.scalars(stmt).first()
        return to_record(obj) if obj is not None else None

    def count_children(self, kind: EntityKind, record_id: str) -> int:
        model = MODELS[kind]
        if not hasattr(model, "parent_id"):
            return 0
        stmt = select(func.count()).select_from(model).where(model.parent_id == record_id)
        return self.session.scalar(stmt) or 0

    def count_external_references(self, kind: EntityKind, record_id: str, reference_kind: EntityKind) -> int:
        key = (reference_kind, kind)
        if key in _FK_LINKS:
            owner = MODELS[reference_kind]
            column = getattr(owner, _FK_LINKS[key])
            stmt = select(func.count()).select_from(owner).where(column == record_id)
        elif key in _TABLE_LINKS:
            table, _, target_col = _TABLE_LINKS[key]
            stmt = select(func.count()).select_from(table).where(table.c[target_col] == record_id)
        else:
            raise ValueError(f"不支持的引用关系: {reference_kind.value} -> {kind.value}")
        return self.session.scalar(stmt) or 0

    def link_targets(self, owner_kind: EntityKind, owner_id: str, target_kind: EntityKind) -> List[str]:
        key = (owner_kind, target_kind)
        if key in _FK_LINKS:
            obj = self.session.get(MODELS[owner_kind], owner_id)
            value = getattr(obj, _FK_LINKS[key]) if obj is not None else None
            return [value] if value is not None else []
        if key in _TABLE_LINKS:
            table, owner_col, target_col = _TABLE_LINKS[key]
            stmt = select(table.c[target_col]).where(table.c[owner_col] == owner_id)
            return sorted(self.session.scalars(stmt))
        raise ValueError(f"不支持的引用关系: {owner_kind.value} -> {target_kind.value}")

    # ==================== 写入 ====================

    def insert(self, kind: EntityKind, record: TreeRecord) -> TreeRecord:
        model = MODELS[kind]
        columns = set(_columns(model))
        values = {k: v for k, v in record.to_dict().items() if k in columns and v is not None}
        obj = model(**values)
        self.session.add(obj)
        self.session.flush()
        return to_record(obj)

    def update(self, kind: EntityKind, record_id: str, **changes: Any) -> TreeRecord:
        obj = self.session.get(MODELS[kind], record_id)
        if obj is None:
            raise KeyError(f"{kind.value} {record_id} 不存在")
        columns = set(_columns(type(obj)))
        for key, value in changes.items():
            if key in columns and key not in ("id", "created_at"):
                setattr(obj, key, value)
        self.session.flush()
        return to_record(obj)

    def delete(self, kind: EntityKind, record_id: str) -> None:
        for (owner_kind, target_kind), (table, owner_col, target_col) in _TABLE_LINKS.items():
            if owner_kind == kind:
                self.session.execute(delete(table).where(table.c[owner_col] == record_id))
            if target_kind == kind:
                self.session.execute(delete(table).where(table.c[target_col] == record_id))
        obj = self.session.get(MODELS[kind], record_id)
        if obj is not None:
            self.session.delete(obj)
            self.session.flush()

    def replace_links(
        self,
        owner_kind: EntityKind,
        owner_id: str,
        target_kind: EntityKind,
        target_ids: Iterable[str],
    ) -> None:
        target_ids = list(dict.fromkeys(target_ids))
        key = (owner_kind, target_kind)
        if key in _FK_LINKS:
            self.update(owner_kind, owner_id, **{_FK_LINKS[key]: target_ids[0] if target_ids else None})
            return
        if key not in _TABLE_LINKS:
            raise ValueError(f"不支持的引用关系: {owner_kind.value} -> {target_kind.value}")
        table, owner_col, target_col = _TABLE_LINKS[key]
        self.session.execute(delete(table).where(table.c[owner_col] == owner_id))
        if target_ids:
            self.session.execute(
                insert(table),
                [{owner_col: owner_id, target_col: target_id} for target_id in target_ids],
            )
        self.session.flush()

    # ==================== 事务 ====================

    @contextmanager
    def transaction(self):
        """事务上下文：成功提交，异常回滚；嵌套调用并入最外层事务"""
        if self._depth > 0:
            yield self
            return
        self._depth += 1
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.debug("事务已回滚")
            raise
        finally:
            self._depth -= 1


__all__ = [
    "MODELS",
    "to_record",
    "SqlAlchemyTreeStore",
]
