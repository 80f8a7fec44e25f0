"""层级树核心模块

部门、权限、商品分类共用的树形结构逻辑:
- 构建: build_forest 将扁平记录构建为森林
- 导航: depth / full_path / descendant_ids / is_leaf 等只读查询
- 校验: validate_new_parent / validate_deletable / validate_depth
- 存储: TreeStore 协议与内存实现 MemoryTreeStore

使用示例:
    from mallcore.tree import build_forest, descendant_ids, validate_new_parent

    result = build_forest(records)
    node = result.get(dept_id)
    validate_new_parent(node, new_parent_id)
"""

from .exceptions import (
    TreeError,
    DuplicateIdError,
    OrphanRecordError,
    CycleDetectedError,
    DetachedNodeError,
    SelfParentError,
    CycleError,
    HasChildrenError,
    InUseError,
    DepthExceededError,
)
from .node import RecordStatus, TreeRecord, TreeAccessor, TreeNode, DEFAULT_ACCESSOR
from .builder import BuildResult, build_forest
from .navigator import (
    depth,
    ancestors,
    path_ids,
    full_path,
    descendant_ids,
    is_leaf,
    height,
    iter_forest,
    find_node,
    flatten_forest,
    filter_forest,
    forest_to_list,
)
from .guard import validate_new_parent, validate_deletable, validate_depth
from .store import EntityKind, RecordFilter, TreeStore, MemoryTreeStore

__all__ = [
    # 异常
    "TreeError",
    "DuplicateIdError",
    "OrphanRecordError",
    "CycleDetectedError",
    "DetachedNodeError",
    "SelfParentError",
    "CycleError",
    "HasChildrenError",
    "InUseError",
    "DepthExceededError",
    # 基础类型
    "RecordStatus",
    "TreeRecord",
    "TreeAccessor",
    "TreeNode",
    "DEFAULT_ACCESSOR",
    # 构建
    "BuildResult",
    "build_forest",
    # 导航
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
    # 校验
    "validate_new_parent",
    "validate_deletable",
    "validate_depth",
    # 存储
    "EntityKind",
    "RecordFilter",
    "TreeStore",
    "MemoryTreeStore",
]
