"""
部门服务

部门树的查询与维护。删除时检查子部门和部门下的管理员，
树节点附带 user_count。
"""

from typing import Any, Dict, List, Optional

from mallcore.exceptions import Err, ErrorCode
from mallcore.tree import (
    CycleError,
    EntityKind,
    HasChildrenError,
    InUseError,
    SelfParentError,
    DepthExceededError,
    TreeNode,
    TreeRecord,
)

from .tree_service import BaseTreeService


class DepartmentService(BaseTreeService):
    """部门服务

    使用示例:
        service = DepartmentService(store, settings)
        service.create(name="技术部", parent_id=root_id, leader_id=user_id)
        service.delete(dept_id)   # 存在子部门或员工时抛出 409
    """

    kind = EntityKind.DEPARTMENT
    entity_label = "部门"
    not_found_code = ErrorCode.DEPARTMENT_NOT_FOUND
    reference_kind = EntityKind.USER
    editable_fields = ("name", "sort_order", "status", "leader_id", "phone", "email")
    error_messages = {
        SelfParentError: "不能将自己设为父部门",
        CycleError: "不能选择子部门作为父部门",
        DepthExceededError: "部门层级超出上限",
        HasChildrenError: "存在子部门，无法删除",
        InUseError: "部门下有员工，无法删除",
    }

    def validate_fields(
        self,
        values: Dict[str, Any],
        records: List[TreeRecord],
        current: Optional[TreeRecord] = None,
    ) -> None:
        leader_id = values.get("leader_id")
        if leader_id and (current is None or leader_id != current.get("leader_id")):
            if self.store.get(EntityKind.USER, leader_id) is None:
                raise Err.not_found("部门负责人不存在", code=ErrorCode.USER_NOT_FOUND, record_id=leader_id)

    def node_extras(self, node: TreeNode) -> Dict[str, Any]:
        return {
            "user_count": self.store.count_external_references(self.kind, node.id, EntityKind.USER),
        }


__all__ = ["DepartmentService"]
