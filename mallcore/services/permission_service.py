"""
权限服务

权限（菜单 / 按钮 / 接口）树的维护，以及按用户角色计算菜单树和权限编码。
"""

from typing import Any, Dict, List, Optional

from mallcore.exceptions import Err, ErrorCode
from mallcore.tree import (
    CycleError,
    EntityKind,
    HasChildrenError,
    InUseError,
    RecordFilter,
    RecordStatus,
    SelfParentError,
    DepthExceededError,
    TreeRecord,
    forest_to_list,
)

from .tree_service import BaseTreeService

MENU = "MENU"

# 菜单树只输出前端路由需要的字段
_MENU_FIELDS = ("id", "parent_id", "name", "code", "path", "component", "icon", "sort_order")


def _menu_dict(record: TreeRecord) -> Dict[str, Any]:
    return {key: record.get(key) for key in _MENU_FIELDS}


class PermissionService(BaseTreeService):
    """权限服务

    使用示例:
        service = PermissionService(store, settings)
        service.get_user_menu_tree(user_id)
        service.get_user_permission_codes(user_id)   # ["system:dept:list", ...]
    """

    kind = EntityKind.PERMISSION
    entity_label = "权限"
    not_found_code = ErrorCode.PERMISSION_NOT_FOUND
    reference_kind = EntityKind.ROLE
    editable_fields = ("name", "code", "type", "path", "component", "icon", "sort_order", "status")
    required_fields = ("name", "code", "type", "sort_order", "status")
    error_messages = {
        SelfParentError: "不能将自己设为父权限",
        CycleError: "不能选择子权限作为父权限",
        DepthExceededError: "权限层级超出上限",
        HasChildrenError: "存在子权限，无法删除",
        InUseError: "该权限正在被角色使用，无法删除",
    }

    def validate_fields(
        self,
        values: Dict[str, Any],
        records: List[TreeRecord],
        current: Optional[TreeRecord] = None,
    ) -> None:
        code = values.get("code")
        if not code:
            return
        exclude_id = current.id if current is not None else None
        if any(r.get("code") == code and r.id != exclude_id for r in records):
            raise Err.conflict("权限编码已存在", code=ErrorCode.DUPLICATE_ENTRY, field="code")

    def get_user_menu_tree(self, user_id: str) -> List[Dict[str, Any]]:
        """用户菜单树

        只包含通过角色授予用户、已启用的 MENU 类型权限。
        父菜单未授予时子菜单提升为根节点（始终使用非严格模式）。
        """
        filters = RecordFilter(status=RecordStatus.ENABLED, type=MENU, granted_to_user=user_id)
        result = self.load_forest(filters, strict=False)
        return forest_to_list(result.roots, serializer=_menu_dict)

    def get_user_permission_codes(self, user_id: str) -> List[str]:
        """用户拥有的全部已启用权限编码"""
        filters = RecordFilter(status=RecordStatus.ENABLED, granted_to_user=user_id)
        records = self.store.fetch_all(self.kind, filters)
        return sorted({r.get("code") for r in records if r.get("code")})


__all__ = ["PermissionService"]
