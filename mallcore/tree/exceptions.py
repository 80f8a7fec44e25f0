"""树形结构异常定义

树核心只做本地、确定性的结构校验，校验失败时抛出下列类型化异常。
这些异常不依赖 Web 框架，由调用方服务层翻译为面向用户的业务异常。

异常层级:
    TreeError
    ├── DuplicateIdError      构建时出现重复 ID
    ├── OrphanRecordError     父节点不在记录集中（严格模式抛出，非严格模式收集）
    ├── CycleDetectedError    内存中的父子链出现环（数据损坏）
    ├── DetachedNodeError     父节点已被回收，无法向上遍历
    ├── SelfParentError       将节点设为自己的父节点
    ├── CycleError            新父节点是自身的后代
    ├── HasChildrenError      存在子节点，不能删除
    ├── InUseError            被外部数据引用，不能删除
    └── DepthExceededError    超出层级上限
"""

from typing import Any, List, Optional, Sequence


class TreeError(Exception):
    """树形结构异常基类

    属性:
        code: 稳定的错误代码，供上层映射错误码
        record_id: 触发异常的记录 ID
    """

    code: str = "TREE_ERROR"

    def __init__(self, message: str, record_id: Any = None):
        self.message = message
        self.record_id = record_id
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(record_id={self.record_id!r}, message={self.message!r})"


class DuplicateIdError(TreeError):
    """记录集中存在重复 ID"""

    code = "TREE_DUPLICATE_ID"

    def __init__(self, record_id: Any):
        super().__init__(f"记录 ID 重复: {record_id}", record_id=record_id)


class OrphanRecordError(TreeError):
    """父节点不存在于当前记录集

    严格模式下直接抛出；非严格模式下节点被提升为根节点，
    异常实例作为说明收集在 BuildResult.errors 中。
    """

    code = "TREE_ORPHAN_RECORD"

    def __init__(self, record_id: Any, parent_id: Any, orphan_ids: Optional[Sequence[Any]] = None):
        self.parent_id = parent_id
        self.orphan_ids: List[Any] = list(orphan_ids) if orphan_ids else [record_id]
        super().__init__(
            f"记录 {record_id} 的父节点 {parent_id} 不存在",
            record_id=record_id,
        )


class CycleDetectedError(TreeError):
    """父子链存在环"""

    code = "TREE_CYCLE_DETECTED"

    def __init__(self, record_ids: Sequence[Any]):
        self.record_ids = list(record_ids)
        first = self.record_ids[0] if self.record_ids else None
        super().__init__(f"检测到循环引用: {self.record_ids}", record_id=first)


class DetachedNodeError(TreeError):
    """父节点已被回收

    TreeNode 只以弱引用指向父节点，单独保留子节点而丢弃 BuildResult 与根节点列表后，
    向上遍历无法得到正确的深度和路径。
    """

    code = "TREE_DETACHED_NODE"

    def __init__(self, record_id: Any, parent_id: Any = None):
        self.parent_id = parent_id
        super().__init__(
            f"节点 {record_id} 的父节点 {parent_id} 已被回收，请持有构建结果或根节点列表",
            record_id=record_id,
        )


class SelfParentError(TreeError):
    """不能将节点设为自己的父节点"""

    code = "TREE_SELF_PARENT"

    def __init__(self, record_id: Any):
        super().__init__(f"不能将节点 {record_id} 设为自己的父节点", record_id=record_id)


class CycleError(TreeError):
    """新父节点是当前节点的后代，移动后会形成环"""

    code = "TREE_CYCLE"

    def __init__(self, record_id: Any, proposed_parent_id: Any):
        self.proposed_parent_id = proposed_parent_id
        super().__init__(
            f"节点 {proposed_parent_id} 是节点 {record_id} 的后代，不能作为其父节点",
            record_id=record_id,
        )


class HasChildrenError(TreeError):
    """存在子节点，不能删除"""

    code = "TREE_HAS_CHILDREN"

    def __init__(self, record_id: Any, child_count: int):
        self.child_count = child_count
        super().__init__(f"节点 {record_id} 存在 {child_count} 个子节点", record_id=record_id)


class InUseError(TreeError):
    """被外部数据引用，不能删除"""

    code = "TREE_IN_USE"

    def __init__(self, record_id: Any, reference_count: int, reference_kind: Any = None):
        self.reference_count = reference_count
        self.reference_kind = reference_kind
        source = f"（{reference_kind}）" if reference_kind is not None else ""
        super().__init__(
            f"节点 {record_id} 被引用 {reference_count} 次{source}",
            record_id=record_id,
        )


class DepthExceededError(TreeError):
    """超出允许的最大层级"""

    code = "TREE_DEPTH_EXCEEDED"

    def __init__(self, resulting_depth: int, max_depth: int, record_id: Any = None):
        self.resulting_depth = resulting_depth
        self.max_depth = max_depth
        super().__init__(
            f"层级 {resulting_depth} 超出上限 {max_depth}",
            record_id=record_id,
        )


__all__ = [
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
]
