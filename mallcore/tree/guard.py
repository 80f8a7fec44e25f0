"""树结构变更校验

在写入前校验结构变更（移动、删除、层级）。每个函数成功时返回 None，
失败时抛出类型化的 TreeError，由服务层翻译为业务异常。

使用示例:
    from mallcore.tree import validate_new_parent, validate_deletable

    validate_new_parent(node, new_parent_id)
    validate_deletable(node, child_count=0, external_reference_count=user_count)
"""

from typing import Any, Optional

from .exceptions import (
    CycleError,
    DepthExceededError,
    HasChildrenError,
    InUseError,
    SelfParentError,
)
from .navigator import descendant_ids
from .node import TreeNode


def validate_new_parent(candidate: TreeNode, proposed_parent_id: Any) -> None:
    """校验将 candidate 移动到 proposed_parent_id 下是否合法

    Raises:
        SelfParentError: 新父节点就是自己
        CycleError: 新父节点是自己的后代
    """
    if proposed_parent_id is None:
        return None
    if proposed_parent_id == candidate.id:
        raise SelfParentError(candidate.id)
    if proposed_parent_id in set(descendant_ids(candidate)):
        raise CycleError(candidate.id, proposed_parent_id)
    return None


def validate_deletable(
    node: TreeNode,
    child_count: int,
    external_reference_count: int,
    reference_kind: Any = None,
) -> None:
    """校验节点是否可删除

    子节点检查优先于外部引用检查。

    Args:
        node: 待删除节点
        child_count: 子节点数量
        external_reference_count: 外部引用数量（部门下用户、分类下商品、使用权限的角色等）
        reference_kind: 外部引用类型，仅用于错误说明

    Raises:
        HasChildrenError: 存在子节点
        InUseError: 存在外部引用
    """
    if child_count > 0:
        raise HasChildrenError(node.id, child_count)
    if external_reference_count > 0:
        raise InUseError(node.id, external_reference_count, reference_kind)
    return None


def validate_depth(
    proposed_parent_depth: int,
    max_depth: Optional[int],
    subtree_height: int = 1,
    record_id: Any = None,
) -> None:
    """校验层级上限

    Args:
        proposed_parent_depth: 新父节点占用的层数（含父节点本身），放在根级时为 0
        max_depth: 最大层数，None 表示不限制
        subtree_height: 被移动子树的层数，新建节点为 1
        record_id: 相关记录 ID，仅用于错误说明

    Raises:
        DepthExceededError: proposed_parent_depth + subtree_height > max_depth
    """
    if max_depth is None:
        return None
    resulting_depth = proposed_parent_depth + subtree_height
    if resulting_depth > max_depth:
        raise DepthExceededError(resulting_depth, max_depth, record_id=record_id)
    return None


__all__ = [
    "validate_new_parent",
    "validate_deletable",
    "validate_depth",
]
