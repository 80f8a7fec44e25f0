"""树构建器

将同一类实体的扁平记录构建为森林（按 parent_id 链接）。

使用示例:
    from mallcore.tree import TreeRecord, build_forest

    records = [
        TreeRecord(id="1", parent_id=None, sort_order=1, name="总部"),
        TreeRecord(id="2", parent_id="1", sort_order=2, name="技术部"),
        TreeRecord(id="3", parent_id="1", sort_order=1, name="财务部"),
    ]
    roots, errors = build_forest(records)
    # roots[0].children -> [财务部, 技术部]

    # 严格模式：父节点缺失时直接抛出 OrphanRecordError
    result = build_forest(records, strict=True)
    node = result.get("2")
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional

from mallcore.log import get_logger

from .exceptions import CycleDetectedError, DuplicateIdError, OrphanRecordError
from .node import DEFAULT_ACCESSOR, TreeAccessor, TreeNode

logger = get_logger()


@dataclass
class BuildResult:
    """构建结果

    属性:
        roots: 按 sort_order 排序的根节点
        errors: 非严格模式下被提升为根的孤立记录说明
        index: ID 到节点的映射，持有全部节点

    支持解包: ``roots, errors = build_forest(records)``
    """
    roots: List[TreeNode]
    errors: List[OrphanRecordError] = field(default_factory=list)
    index: Dict[Any, TreeNode] = field(default_factory=dict)

    def __iter__(self) -> Iterator:
        return iter((self.roots, self.errors))

    @property
    def size(self) -> int:
        """记录数量"""
        return len(self.index)

    @property
    def orphan_ids(self) -> List[Any]:
        return [error.record_id for error in self.errors]

    def get(self, record_id: Any) -> Optional[TreeNode]:
        return self.index.get(record_id)

    def __contains__(self, record_id: Any) -> bool:
        return record_id in self.index


def _sort_key(node: TreeNode):
    return node.sort_order


def build_forest(
    records: Iterable[Any],
    strict: bool = False,
    accessor: Optional[TreeAccessor] = None,
) -> BuildResult:
    """将扁平记录构建为森林

    Args:
        records: 扁平记录（TreeRecord、字典或任意对象），ID 必须唯一
        strict: 严格模式。父节点不在记录集中时抛出 OrphanRecordError；
            非严格模式下该节点被提升为根，并记录到 errors
        accessor: 字段访问器，默认读取 id / parent_id / sort_order

    Returns:
        BuildResult

    Raises:
        DuplicateIdError: 存在重复 ID
        OrphanRecordError: 严格模式下存在孤立记录
        CycleDetectedError: 记录的父子链形成环（含自引用）
    """
    accessor = accessor or DEFAULT_ACCESSOR

    # 第一遍：ID -> 节点
    index: Dict[Any, TreeNode] = {}
    nodes: List[TreeNode] = []
    for record in records:
        node = TreeNode(record, accessor)
        if node.id in index:
            raise DuplicateIdError(node.id)
        index[node.id] = node
        nodes.append(node)

    # 第二遍：建立父子关系
    roots: List[TreeNode] = []
    orphans: List[TreeNode] = []
    for node in nodes:
        if node.parent_id is None:
            roots.append(node)
            continue
        parent = index.get(node.parent_id)
        if parent is None:
            orphans.append(node)
            roots.append(node)
            continue
        parent.add_child(node)

    if orphans and strict:
        first = orphans[0]
        raise OrphanRecordError(first.id, first.parent_id, [n.id for n in orphans])

    errors = [OrphanRecordError(n.id, n.parent_id) for n in orphans]
    if errors:
        logger.warning(
            f"孤立记录已提升为根节点: {[(n.id, n.parent_id) for n in orphans]}"
        )

    # 从根出发遍历并排序；环上的节点不可达
    roots.sort(key=_sort_key)
    reached = set()
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        reached.add(node.id)
        node.children.sort(key=_sort_key)
        stack.extend(reversed(node.children))

    if len(reached) != len(nodes):
        looping = [n.id for n in nodes if n.id not in reached]
        raise CycleDetectedError(looping)

    return BuildResult(roots=roots, errors=errors, index=index)


__all__ = [
    "BuildResult",
    "build_forest",
]
