"""树形结构基础类型

- TreeRecord: 持久层返回的扁平记录（部门、权限、分类共用）
- TreeAccessor: 记录字段访问器，让同一套树逻辑适配不同实体
- TreeNode: 内存中的树节点，持有子节点，父节点只保留弱引用

使用示例:
    from mallcore.tree import TreeRecord, TreeAccessor

    record = TreeRecord(id="1", parent_id=None, sort_order=1, name="总部")

    # 字典或 ORM 对象也可以直接参与构建，只需指定字段名
    accessor = TreeAccessor(id_field="id", parent_field="pid", sort_field="sort")
"""

import weakref
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import DetachedNodeError


class RecordStatus(IntEnum):
    """记录状态"""
    DISABLED = 0
    ENABLED = 1


@dataclass(frozen=True)
class TreeRecord:
    """扁平树记录

    属性:
        id: 记录 ID（创建后不可变）
        parent_id: 父记录 ID，None 表示根
        sort_order: 同级排序值，升序
        status: 启用/停用
        name: 名称（默认的路径标签字段）
        payload: 业务字段（编码、路由、图标等），树逻辑不读取
        created_at: 创建时间。同级排序值相同时树构建保持输入顺序，
            数据库存储按 (sort_order, created_at) 返回记录，因此相当于按创建顺序
    """
    id: str
    parent_id: Optional[str] = None
    sort_order: int = 0
    status: int = RecordStatus.ENABLED
    name: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    @property
    def is_enabled(self) -> bool:
        return self.status == RecordStatus.ENABLED

    def get(self, key: str, default: Any = None) -> Any:
        """读取字段，优先读取固定属性，其次读取 payload"""
        if key in _RECORD_FIELDS:
            return getattr(self, key)
        return self.payload.get(key, default)

    def evolve(self, **changes: Any) -> "TreeRecord":
        """返回修改后的新记录，payload 字段会被合并"""
        base_changes = {k: v for k, v in changes.items() if k in _RECORD_FIELDS and k != "payload"}
        payload_changes = {k: v for k, v in changes.items() if k not in _RECORD_FIELDS}
        payload = dict(self.payload)
        payload.update(changes.get("payload") or {})
        payload.update(payload_changes)
        return replace(self, payload=payload, **base_changes)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.payload)
        data.update({
            "id": self.id,
            "parent_id": self.parent_id,
            "sort_order": self.sort_order,
            "status": int(self.status),
            "name": self.name,
            "created_at": self.created_at,
        })
        return data


_RECORD_FIELDS = frozenset(("id", "parent_id", "sort_order", "status", "name", "payload", "created_at"))


@dataclass(frozen=True)
class TreeAccessor:
    """记录字段访问器

    与 build_tree_list 的 id_field / parent_field 参数一致，按字段名读取记录。
    支持字典、TreeRecord（含 payload）以及任意带属性的对象。
    """
    id_field: str = "id"
    parent_field: str = "parent_id"
    sort_field: str = "sort_order"
    label_field: str = "name"

    @staticmethod
    def read(record: Any, field_name: str, default: Any = None) -> Any:
        if isinstance(record, Mapping):
            return record.get(field_name, default)
        if isinstance(record, TreeRecord):
            return record.get(field_name, default)
        return getattr(record, field_name, default)

    def id_of(self, record: Any) -> Any:
        return self.read(record, self.id_field)

    def parent_of(self, record: Any) -> Any:
        parent_id = self.read(record, self.parent_field)
        # 空字符串与 None 同样视为根
        if parent_id == "":
            return None
        return parent_id

    def sort_of(self, record: Any) -> Any:
        value = self.read(record, self.sort_field)
        return 0 if value is None else value

    def label_of(self, record: Any, label_field: Optional[str] = None) -> str:
        value = self.read(record, label_field or self.label_field)
        return "" if value is None else str(value)


DEFAULT_ACCESSOR = TreeAccessor()


class TreeNode:
    """内存树节点

    节点持有子节点列表；父节点只保留弱引用，仅用于向上遍历（深度、路径），
    不参与生命周期管理。调用方需要持有 BuildResult 或根节点列表，
    单独保留某个子节点时其祖先可能已被回收，此时读取 parent 抛出 DetachedNodeError。
    """

    __slots__ = ("record", "id", "parent_id", "sort_order", "children", "accessor", "_parent_ref", "__weakref__")

    def __init__(self, record: Any, accessor: TreeAccessor = DEFAULT_ACCESSOR):
        self.record = record
        self.accessor = accessor
        self.id = accessor.id_of(record)
        self.parent_id = accessor.parent_of(record)
        self.sort_order = accessor.sort_of(record)
        self.children: List["TreeNode"] = []
        self._parent_ref: Optional[weakref.ref] = None

    @property
    def parent(self) -> Optional["TreeNode"]:
        """父节点，根节点为 None

        Raises:
            DetachedNodeError: 父节点已被回收
        """
        if self._parent_ref is None:
            return None
        parent = self._parent_ref()
        if parent is None:
            raise DetachedNodeError(self.id, self.parent_id)
        return parent

    @property
    def is_root(self) -> bool:
        return self._parent_ref is None

    def add_child(self, child: "TreeNode") -> "TreeNode":
        child._parent_ref = weakref.ref(self)
        self.children.append(child)
        return child

    def label(self, label_field: Optional[str] = None) -> str:
        return self.accessor.label_of(self.record, label_field)

    def __repr__(self) -> str:
        return f"TreeNode(id={self.id!r}, parent_id={self.parent_id!r}, children={len(self.children)})"


__all__ = [
    "RecordStatus",
    "TreeRecord",
    "TreeAccessor",
    "DEFAULT_ACCESSOR",
    "TreeNode",
]
