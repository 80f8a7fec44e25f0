"""树导航函数

基于已构建节点的只读查询：深度、路径、祖先、后代、叶子判断，
以及森林的遍历、查找、展平、过滤与序列化。

所有函数都是纯函数，不做 I/O，可被并发读取方安全调用。

使用示例:
    from mallcore.tree import build_forest, depth, full_path, descendant_ids

    result = build_forest(records)
    node = result.get("4")
    depth(node)            # 2
    full_path(node)        # "总部 / 技术部 / 后端组"
    descendant_ids(result.get("1"))
"""

from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from .exceptions import CycleDetectedError
from .node import TreeNode, TreeRecord


def _walk_up(node: TreeNode, max_steps: Optional[int] = None) -> List[TreeNode]:
    """从节点向上走到根，返回 [node, parent, ..., root]

    重复访问或步数超过 max_steps 时抛出 CycleDetectedError。
    """
    chain = [node]
    seen = {id(node)}
    current = node.parent
    while current is not None:
        if id(current) in seen:
            raise CycleDetectedError([n.id for n in chain])
        if max_steps is not None and len(chain) > max_steps:
            raise CycleDetectedError([n.id for n in chain])
        seen.add(id(current))
        chain.append(current)
        current = current.parent
    return chain


def depth(node: TreeNode, max_steps: Optional[int] = None) -> int:
    """节点到根的跳数，根节点为 0

    Args:
        node: 树节点
        max_steps: 最大步数，通常传入记录总数

    Raises:
        CycleDetectedError: 向上遍历时出现环
    """
    return len(_walk_up(node, max_steps)) - 1


def ancestors(node: TreeNode, max_steps: Optional[int] = None) -> List[TreeNode]:
    """祖先节点列表（从根到直接父节点）"""
    chain = _walk_up(node, max_steps)
    chain.reverse()
    return chain[:-1]


def path_ids(node: TreeNode, max_steps: Optional[int] = None) -> List[Any]:
    """从根到当前节点的 ID 列表（包含自身）"""
    chain = _walk_up(node, max_steps)
    return [n.id for n in reversed(chain)]


def full_path(
    node: TreeNode,
    separator: str = " / ",
    label_field: Optional[str] = None,
) -> str:
    """从根到当前节点的标签路径

    Args:
        node: 树节点
        separator: 分隔符
        label_field: 标签字段名，默认使用访问器的 label_field（name）
    """
    chain = _walk_up(node)
    return separator.join(n.label(label_field) for n in reversed(chain))


def descendant_ids(node: TreeNode) -> List[Any]:
    """所有后代节点 ID（不含自身），先序遍历，同级按子节点顺序"""
    result: List[Any] = []
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        result.append(current.id)
        stack.extend(reversed(current.children))
    return result


def is_leaf(node: TreeNode) -> bool:
    return not node.children


def height(node: TreeNode) -> int:
    """以节点为根的子树层数，叶子节点为 1"""
    result = 0
    stack = [(node, 1)]
    while stack:
        current, level = stack.pop()
        if level > result:
            result = level
        stack.extend((child, level + 1) for child in current.children)
    return result


def iter_forest(roots: Sequence[TreeNode]) -> Iterator[TreeNode]:
    """先序遍历整个森林"""
    stack = list(reversed(roots))
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_node(roots: Sequence[TreeNode], target_id: Any) -> Optional[TreeNode]:
    """在森林中查找指定 ID 的节点，未找到返回 None"""
    for node in iter_forest(roots):
        if node.id == target_id:
            return node
    return None


def flatten_forest(roots: Sequence[TreeNode]) -> List[TreeNode]:
    """展平为先序节点列表"""
    return list(iter_forest(roots))


def filter_forest(
    roots: Sequence[TreeNode],
    predicate: Callable[[TreeNode], bool],
    keep_ancestors: bool = True,
) -> List[TreeNode]:
    """过滤森林，返回新的节点副本

    Args:
        roots: 根节点列表
        predicate: 返回 True 表示保留
        keep_ancestors: 保留匹配节点的祖先（即使祖先本身不匹配）；
            为 False 时，未匹配节点下的匹配后代上移到该节点所在层级

    使用示例:
        # 名称搜索，保留上级部门以便展示完整路径
        matched = filter_forest(roots, lambda n: "技术" in n.label())
    """
    result: List[TreeNode] = []
    for node in roots:
        kept_children = filter_forest(node.children, predicate, keep_ancestors)
        if predicate(node) or (keep_ancestors and kept_children):
            copy = TreeNode(node.record, node.accessor)
            for child in kept_children:
                copy.add_child(child)
            result.append(copy)
        elif not keep_ancestors:
            result.extend(kept_children)
    return result


def _record_to_dict(record: Any) -> Dict[str, Any]:
    if isinstance(record, TreeRecord):
        return record.to_dict()
    if isinstance(record, Mapping):
        return dict(record)
    return {k: v for k, v in vars(record).items() if not k.startswith("_")}


def forest_to_list(
    roots: Sequence[TreeNode],
    children_field: str = "children",
    include_depth: bool = False,
    include_path: bool = False,
    include_leaf: bool = False,
    separator: str = " / ",
    serializer: Optional[Callable[[Any], Dict[str, Any]]] = None,
    extras: Optional[Callable[[TreeNode], Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """序列化为嵌套字典列表

    深度和路径按遍历过程累加，不对每个节点单独向上遍历。

    Args:
        roots: 根节点列表
        children_field: 子节点字段名
        include_depth: 输出 depth 字段
        include_path: 输出 full_path 字段
        include_leaf: 输出 is_leaf 字段
        separator: 路径分隔符
        serializer: 记录转字典函数，默认处理 TreeRecord / 字典 / 普通对象
        extras: 额外字段函数，返回值合并进节点字典
    """
    to_dict = serializer or _record_to_dict

    def convert(nodes: Iterable[TreeNode], level: int, prefix: str) -> List[Dict[str, Any]]:
        items = []
        for node in nodes:
            label = node.label()
            path = f"{prefix}{separator}{label}" if prefix else label
            data = to_dict(node.record)
            if include_depth:
                data["depth"] = level
            if include_path:
                data["full_path"] = path
            if include_leaf:
                data["is_leaf"] = is_leaf(node)
            if extras is not None:
                data.update(extras(node))
            data[children_field] = convert(node.children, level + 1, path)
            items.append(data)
        return items

    return convert(roots, 0, "")


__all__ = [
    "depth",
    "ancestors",
    "path_ids",
    "full_path",
    "descendant_ids",
    "is_leaf",
    "height",
    "iter_forest",
    "find_node",
    "flatten_forest",
    "filter_forest",
    "forest_to_list",
]
