"""扁平记录存储接口

树核心不直接访问数据库。服务层通过构造函数注入一个 TreeStore，
生产环境使用 SQLAlchemy 实现（mallcore.orm.tree_store），测试和脚本
使用本模块的 MemoryTreeStore。

实体之间的外部引用统一抽象为"链接"（owner -> target）:
    USER    -> DEPARTMENT   用户所属部门
    USER    -> ROLE         用户拥有的角色
    ROLE    -> PERMISSION   角色拥有的权限
    PRODUCT -> CATEGORY     商品所属分类

使用示例:
    store = MemoryTreeStore()
    store.insert(EntityKind.DEPARTMENT, TreeRecord(id="1", name="总部"))
    store.link(EntityKind.USER, "u1", EntityKind.DEPARTMENT, "1")

    with store.transaction():
        records = store.fetch_all(EntityKind.DEPARTMENT, for_update=True)
        ...
"""

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ContextManager, Dict, Iterable, List, Optional, Protocol, Set, Tuple

from .exceptions import DuplicateIdError
from .node import TreeRecord


class EntityKind(str, Enum):
    """实体类型"""
    DEPARTMENT = "department"
    PERMISSION = "permission"
    CATEGORY = "category"
    ROLE = "role"
    USER = "user"
    PRODUCT = "product"


@dataclass
class RecordFilter:
    """记录过滤条件

    属性:
        name: 名称包含
        code: 编码包含
        status: 状态等于
        type: 类型等于（权限类型）
        granted_to_user: 仅返回通过角色授予该用户的记录（权限）
    """
    name: Optional[str] = None
    code: Optional[str] = None
    status: Optional[int] = None
    type: Optional[str] = None
    granted_to_user: Optional[str] = None

    def matches(self, record: TreeRecord) -> bool:
        """按字段条件判断（不含 granted_to_user）"""
        if self.name and self.name not in (record.name or ""):
            return False
        if self.code and self.code not in (record.get("code") or ""):
            return False
        if self.status is not None and int(record.status) != int(self.status):
            return False
        if self.type is not None and record.get("type") != self.type:
            return False
        return True


class TreeStore(Protocol):
    """扁平记录存储协议"""

    def fetch_all(
        self,
        kind: EntityKind,
        filters: Optional[RecordFilter] = None,
        for_update: bool = False,
    ) -> List[TreeRecord]:
        ...

    def get(self, kind: EntityKind, record_id: str, for_update: bool = False) -> Optional[TreeRecord]:
        ...

    def count_children(self, kind: EntityKind, record_id: str) -> int:
        ...

    def count_external_references(self, kind: EntityKind, record_id: str, reference_kind: EntityKind) -> int:
        ...

    def insert(self, kind: EntityKind, record: TreeRecord) -> TreeRecord:
        ...

    def update(self, kind: EntityKind, record_id: str, **changes: Any) -> TreeRecord:
        ...

    def delete(self, kind: EntityKind, record_id: str) -> None:
        ...

    def link_targets(self, owner_kind: EntityKind, owner_id: str, target_kind: EntityKind) -> List[str]:
        ...

    def replace_links(
        self,
        owner_kind: EntityKind,
        owner_id: str,
        target_kind: EntityKind,
        target_ids: Iterable[str],
    ) -> None:
        ...

    def transaction(self) -> ContextManager[Any]:
        ...


Link = Tuple[EntityKind, str, EntityKind, str]


class MemoryTreeStore:
    """内存存储

    事务通过快照实现：每层事务开始时复制全部数据，异常时恢复到该层开始前，
    外层捕获内层异常后可以继续提交自己的修改。
    事务之间通过可重入锁串行化，等价于数据库的行锁。
    """

    def __init__(self):
        self._records: Dict[EntityKind, Dict[str, TreeRecord]] = {kind: {} for kind in EntityKind}
        self._links: Set[Link] = set()
        self._lock = threading.RLock()

    # ==================== 读取 ====================

    def fetch_all(
        self,
        kind: EntityKind,
        filters: Optional[RecordFilter] = None,
        for_update: bool = False,
    ) -> List[TreeRecord]:
        records = list(self._records[kind].values())
        if filters is None:
            return records
        if filters.granted_to_user is not None:
            granted = self._granted_ids(filters.granted_to_user)
            records = [r for r in records if r.id in granted]
        return [r for r in records if filters.matches(r)]

    def get(self, kind: EntityKind, record_id: str, for_update: bool = False) -> Optional[TreeRecord]:
        return self._records[kind].get(record_id)

    def count_children(self, kind: EntityKind, record_id: str) -> int:
        return sum(1 for r in self._records[kind].values() if r.parent_id == record_id)

    def count_external_references(self, kind: EntityKind, record_id: str, reference_kind: EntityKind) -> int:
        return sum(
            1 for owner_kind, _, target_kind, target_id in self._links
            if owner_kind == reference_kind and target_kind == kind and target_id == record_id
        )

    def link_targets(self, owner_kind: EntityKind, owner_id: str, target_kind: EntityKind) -> List[str]:
        return sorted(
            target_id for o_kind, o_id, t_kind, target_id in self._links
            if o_kind == owner_kind and o_id == owner_id and t_kind == target_kind
        )

    def _granted_ids(self, user_id: str) -> Set[str]:
        role_ids = set(self.link_targets(EntityKind.USER, user_id, EntityKind.ROLE))
        return {
            target_id for o_kind, o_id, t_kind, target_id in self._links
            if o_kind == EntityKind.ROLE and o_id in role_ids and t_kind == EntityKind.PERMISSION
        }

    # ==================== 写入 ====================

    def insert(self, kind: EntityKind, record: TreeRecord) -> TreeRecord:
        if record.id in self._records[kind]:
            raise DuplicateIdError(record.id)
        if record.created_at is None:
            record = record.evolve(created_at=datetime.now())
        self._records[kind][record.id] = record
        return record

    def update(self, kind: EntityKind, record_id: str, **changes: Any) -> TreeRecord:
        current = self._records[kind].get(record_id)
        if current is None:
            raise KeyError(f"{kind.value} {record_id} 不存在")
        updated = current.evolve(**changes)
        self._records[kind][record_id] = updated
        return updated

    def delete(self, kind: EntityKind, record_id: str) -> None:
        self._records[kind].pop(record_id, None)
        self._links = {
            link for link in self._links
            if not ((link[0] == kind and link[1] == record_id) or (link[2] == kind and link[3] == record_id))
        }

    def link(self, owner_kind: EntityKind, owner_id: str, target_kind: EntityKind, target_id: str) -> None:
        self._links.add((owner_kind, owner_id, target_kind, target_id))

    def replace_links(
        self,
        owner_kind: EntityKind,
        owner_id: str,
        target_kind: EntityKind,
        target_ids: Iterable[str],
    ) -> None:
        self._links = {
            link for link in self._links
            if not (link[0] == owner_kind and link[1] == owner_id and link[2] == target_kind)
        }
        for target_id in target_ids:
            self._links.add((owner_kind, owner_id, target_kind, target_id))

    # ==================== 事务 ====================

    @contextmanager
    def transaction(self):
        """每一层都保存快照，异常时只恢复到本层开始时的状态"""
        with self._lock:
            snapshot = (copy.deepcopy(self._records), set(self._links))
            try:
                yield self
            except Exception:
                self._records, self._links = snapshot
                raise


__all__ = [
    "EntityKind",
    "RecordFilter",
    "TreeStore",
    "MemoryTreeStore",
]
