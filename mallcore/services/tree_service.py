"""
层级树服务基类

部门、权限、商品分类三类服务共用的读取与变更流程:
- 读取: 存储 -> build_forest -> 过滤 / 序列化
- 变更: 事务内重新读取并加锁 -> 结构校验 -> 写入；任一步失败整体回滚

使用示例:
    from mallcore.services import DepartmentService

    service = DepartmentService(store, settings)
    view = service.get_tree(name="技术")
    service.move(dept_id, new_parent_id)
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from mallcore.config import AppSettings
from mallcore.exceptions import Err, ErrorCode, translate_tree_error
from mallcore.log import get_logger
from mallcore.schemas import Page, paginate
from mallcore.tree import (
    BuildResult,
    EntityKind,
    OrphanRecordError,
    RecordFilter,
    TreeError,
    TreeNode,
    TreeRecord,
    TreeStore,
    build_forest,
    depth,
    descendant_ids,
    filter_forest,
    forest_to_list,
    full_path,
    height,
    is_leaf,
    validate_deletable,
    validate_depth,
    validate_new_parent,
)

logger = get_logger()


@dataclass
class TreeView:
    """树查询结果

    属性:
        items: 序列化后的嵌套节点列表
        orphans: 被提升为根节点的孤立记录
    """
    items: List[Dict[str, Any]]
    orphans: List[OrphanRecordError] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [error.message for error in self.orphans]


class BaseTreeService:
    """层级树服务基类

    子类配置:
        kind: 实体类型
        entity_label: 实体中文名，用于默认提示
        not_found_code: 记录不存在时的错误码
        parent_not_found_message: 父节点不存在时的提示
        reference_kind: 删除时检查的外部引用类型（None 表示不检查）
        error_messages: 树结构异常类型 -> 面向用户的提示
        editable_fields: create / update 允许写入的字段
        required_fields: 不可为空的字段，update 时传入 None 视为未修改
    """

    kind: EntityKind = None
    entity_label: str = "记录"
    not_found_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND
    reference_kind: Optional[EntityKind] = None
    parent_not_found_message: Optional[str] = None
    error_messages: Dict[Type[TreeError], str] = {}
    editable_fields: tuple = ("name", "sort_order", "status")
    required_fields: tuple = ("name", "sort_order", "status")

    def __init__(self, store: TreeStore, settings: Optional[AppSettings] = None):
        if self.kind is None:
            raise ValueError("请在子类中配置 kind")
        self.store = store
        self.settings = settings or AppSettings()

    # ==================== 配置 ====================

    @property
    def tree_settings(self):
        return self.settings.tree

    @property
    def max_depth(self) -> Optional[int]:
        return getattr(self.tree_settings, f"{self.kind.value}_max_depth", None)

    @property
    def separator(self) -> str:
        return self.tree_settings.path_separator

    # ==================== 内部工具 ====================

    def _reject(self, exc: TreeError):
        """树结构异常翻译为业务异常并记录日志"""
        message = self.error_messages.get(type(exc))
        if message is not None:
            # 提示中可以引用异常属性，如 {max_depth}
            message = message.format_map(vars(exc))
        logger.warning(f"{self.entity_label}变更被拒绝: {exc!r}")
        return translate_tree_error(exc, message)

    def _not_found(self, record_id: Any, message: Optional[str] = None):
        return Err.not_found(
            message or f"{self.entity_label}不存在",
            code=self.not_found_code,
            record_id=record_id,
        )

    def _parent_not_found(self, parent_id: Any):
        return Err.not_found(
            self.parent_not_found_message or f"父{self.entity_label}不存在",
            code=ErrorCode.PARENT_NOT_FOUND,
            record_id=parent_id,
        )

    def _build(self, records: List[TreeRecord], strict: Optional[bool] = None) -> BuildResult:
        if strict is None:
            strict = self.tree_settings.strict_orphans
        try:
            return build_forest(records, strict=strict)
        except TreeError as exc:
            raise self._reject(exc) from exc

    def _require(self, record_id: str, for_update: bool = False) -> TreeRecord:
        record = self.store.get(self.kind, record_id, for_update=for_update)
        if record is None:
            raise self._not_found(record_id)
        return record

    def _levels_to(self, result: BuildResult, parent_id: Optional[str]) -> int:
        """parent_id 所占层数（含自身），根级放置为 0"""
        if parent_id is None:
            return 0
        parent = result.get(parent_id)
        if parent is None:
            raise self._parent_not_found(parent_id)
        try:
            return depth(parent, result.size) + 1
        except TreeError as exc:
            raise self._reject(exc) from exc

    def _check_depth(self, parent_levels: int, subtree_height: int = 1, record_id: Any = None):
        try:
            validate_depth(parent_levels, self.max_depth, subtree_height, record_id=record_id)
        except TreeError as exc:
            raise self._reject(exc) from exc

    def _pick(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return {
            k: v for k, v in values.items()
            if k in self.editable_fields and not (v is None and k in self.required_fields)
        }

    # ==================== 子类扩展点 ====================

    def validate_fields(
        self,
        values: Dict[str, Any],
        records: List[TreeRecord],
        current: Optional[TreeRecord] = None,
    ) -> None:
        """业务字段校验（唯一性等），records 为事务内读取的全部记录"""
        return None

    def before_insert(self, values: Dict[str, Any], parent_levels: int) -> Dict[str, Any]:
        return values

    def after_move(self, node: TreeNode, parent_levels: int) -> None:
        return None

    def node_extras(self, node: TreeNode) -> Dict[str, Any]:
        """树节点附加字段"""
        return {}

    # ==================== 查询 ====================

    def load_forest(self, filters: Optional[RecordFilter] = None, strict: Optional[bool] = None) -> BuildResult:
        records = self.store.fetch_all(self.kind, filters)
        return self._build(records, strict=strict)

    def serialize(self, roots: List[TreeNode], include_depth: bool = True) -> List[Dict[str, Any]]:
        return forest_to_list(
            roots,
            include_depth=include_depth,
            include_path=True,
            include_leaf=True,
            separator=self.separator,
            extras=self.node_extras,
        )

    def get_tree(
        self,
        name: Optional[str] = None,
        status: Optional[int] = None,
        **filters: Any,
    ) -> TreeView:
        """获取树

        状态、类型等条件交给存储过滤；名称搜索在内存中进行，
        匹配节点的祖先保留在结果中，便于展示完整路径。
        """
        result = self.load_forest(RecordFilter(status=status, **filters))
        roots = result.roots
        if name:
            roots = filter_forest(roots, lambda n: name in n.label())
        return TreeView(items=self.serialize(roots), orphans=result.errors)

    def get_list(self, **filters: Any) -> List[Dict[str, Any]]:
        """扁平列表（sort_order 升序）"""
        records = self.store.fetch_all(self.kind, RecordFilter(**filters))
        return [r.to_dict() for r in sorted(records, key=lambda r: r.sort_order)]

    def get_page(self, page: int = 1, page_size: int = 10, **filters: Any) -> Page:
        """分页的扁平列表，排序与 get_list 相同"""
        return paginate(self.get_list(**filters), page, page_size)

    def get(self, record_id: str) -> Dict[str, Any]:
        """获取详情，附带深度、完整路径、父节点和直接子节点"""
        result = self.load_forest(strict=False)
        node = result.get(record_id)
        if node is None:
            raise self._not_found(record_id)
        try:
            data = node.record.to_dict()
            data["depth"] = depth(node, result.size)
            data["full_path"] = full_path(node, self.separator)
        except TreeError as exc:
            raise self._reject(exc) from exc
        data["is_leaf"] = is_leaf(node)
        parent = node.parent
        data["parent"] = parent.record.to_dict() if parent is not None else None
        data["children"] = [child.record.to_dict() for child in node.children]
        data.update(self.node_extras(node))
        return data

    def get_descendant_ids(self, record_id: str) -> List[str]:
        result = self.load_forest(strict=False)
        node = result.get(record_id)
        if node is None:
            raise self._not_found(record_id)
        return descendant_ids(node)

    # ==================== 变更 ====================

    def create(self, **values: Any) -> Dict[str, Any]:
        """创建记录

        Raises:
            ResourceNotFoundException: 父节点不存在
            ValidationException: 超出层级上限
            ResourceConflictException: 业务字段冲突
        """
        parent_id = values.get("parent_id") or None
        with self.store.transaction():
            records = self.store.fetch_all(self.kind, for_update=True)
            self.validate_fields(values, records)
            result = self._build(records, strict=False)
            parent_levels = self._levels_to(result, parent_id)
            self._check_depth(parent_levels)

            data = {k: v for k, v in self._pick(values).items() if v is not None}
            data = self.before_insert(data, parent_levels)
            record = TreeRecord(id=str(uuid.uuid4()), parent_id=parent_id).evolve(**data)
            record = self.store.insert(self.kind, record)
        logger.info(f"创建{self.entity_label}: id={record.id}, name={record.name}, parent_id={parent_id}")
        return record.to_dict()

    def update(self, record_id: str, **changes: Any) -> Dict[str, Any]:
        """更新记录，parent_id 变化时按移动处理"""
        with self.store.transaction():
            current = self._require(record_id, for_update=True)
            records = self.store.fetch_all(self.kind, for_update=True)
            self.validate_fields(changes, records, current=current)

            if "parent_id" in changes:
                new_parent_id = changes.pop("parent_id") or None
                if new_parent_id != current.parent_id:
                    self._apply_move(records, current, new_parent_id)

            data = self._pick(changes)
            updated = self.store.update(self.kind, record_id, **data) if data else self.store.get(self.kind, record_id)
        logger.info(f"更新{self.entity_label}: id={record_id}, fields={sorted(data)}")
        return updated.to_dict()

    def move(self, record_id: str, new_parent_id: Optional[str], sort_order: Optional[int] = None) -> Dict[str, Any]:
        """移动节点到新的父节点下（None 表示移动到根级）"""
        new_parent_id = new_parent_id or None
        with self.store.transaction():
            current = self._require(record_id, for_update=True)
            records = self.store.fetch_all(self.kind, for_update=True)
            self._apply_move(records, current, new_parent_id)
            if sort_order is not None:
                self.store.update(self.kind, record_id, sort_order=sort_order)
            moved = self.store.get(self.kind, record_id)
        logger.info(
            f"移动{self.entity_label}: id={record_id}, {current.parent_id} -> {new_parent_id}"
        )
        return moved.to_dict()

    def _apply_move(self, records: List[TreeRecord], current: TreeRecord, new_parent_id: Optional[str]) -> None:
        result = self._build(records, strict=False)
        node = result.get(current.id)
        try:
            validate_new_parent(node, new_parent_id)
        except TreeError as exc:
            raise self._reject(exc) from exc
        parent_levels = self._levels_to(result, new_parent_id)
        self._check_depth(parent_levels, height(node), record_id=current.id)

        self.store.update(self.kind, current.id, parent_id=new_parent_id)
        self.after_move(node, parent_levels)

    def delete(self, record_id: str) -> Dict[str, Any]:
        """删除记录，存在子节点或外部引用时拒绝"""
        with self.store.transaction():
            record = self._require(record_id, for_update=True)
            child_count = self.store.count_children(self.kind, record_id)
            reference_count = 0
            if self.reference_kind is not None:
                reference_count = self.store.count_external_references(
                    self.kind, record_id, self.reference_kind
                )
            try:
                validate_deletable(
                    TreeNode(record),
                    child_count,
                    reference_count,
                    reference_kind=self.reference_kind.value if self.reference_kind else None,
                )
            except TreeError as exc:
                raise self._reject(exc) from exc
            self.store.delete(self.kind, record_id)
        logger.info(f"删除{self.entity_label}: id={record_id}, name={record.name}")
        return {"id": record_id}


__all__ = [
    "TreeView",
    "BaseTreeService",
]
