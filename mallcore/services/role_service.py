"""
角色服务

角色本身不是树，但删除校验复用树的 validate_deletable（子节点数恒为 0），
角色权限分配会校验所有权限都存在。
"""

import uuid
from typing import Any, Dict, List, Optional, Sequence

from mallcore.config import AppSettings
from mallcore.exceptions import Err, ErrorCode, translate_tree_error
from mallcore.log import get_logger
from mallcore.schemas import Page, paginate
from mallcore.tree import (
    EntityKind,
    InUseError,
    RecordFilter,
    TreeError,
    TreeNode,
    TreeRecord,
    TreeStore,
    validate_deletable,
)

logger = get_logger()


class RoleService:
    """角色服务

    使用示例:
        service = RoleService(store, settings)
        role = service.create(name="运营", code="operator", permission_ids=[p1, p2])
        service.assign_permissions(role["id"], [p1])
    """

    editable_fields = ("name", "code", "description", "sort_order", "status")
    # 不可为空，更新时传入 None 视为未修改
    required_fields = ("name", "code", "sort_order", "status")

    def __init__(self, store: TreeStore, settings: Optional[AppSettings] = None):
        self.store = store
        self.settings = settings or AppSettings()

    def _require(self, role_id: str, for_update: bool = False) -> TreeRecord:
        record = self.store.get(EntityKind.ROLE, role_id, for_update=for_update)
        if record is None:
            raise Err.not_found("角色不存在", code=ErrorCode.ROLE_NOT_FOUND, record_id=role_id)
        return record

    def _check_unique(self, values: Dict[str, Any], exclude_id: Optional[str] = None) -> None:
        records = self.store.fetch_all(EntityKind.ROLE, for_update=True)
        others = [r for r in records if r.id != exclude_id]
        code = values.get("code")
        if code and any(r.get("code") == code for r in others):
            raise Err.conflict("角色编码已存在", code=ErrorCode.DUPLICATE_ENTRY, field="code")
        name = values.get("name")
        if name and any(r.name == name for r in others):
            raise Err.conflict("角色名称已存在", code=ErrorCode.DUPLICATE_ENTRY, field="name")

    def _check_permissions(self, permission_ids: Sequence[str]) -> List[str]:
        permission_ids = list(dict.fromkeys(permission_ids))
        missing = [pid for pid in permission_ids if self.store.get(EntityKind.PERMISSION, pid) is None]
        if missing:
            raise Err.not_found(
                "部分权限不存在",
                code=ErrorCode.PERMISSION_NOT_FOUND,
                details=[f"权限不存在: {pid}" for pid in missing],
            )
        return permission_ids

    @staticmethod
    def _sorted(records: List[TreeRecord]) -> List[TreeRecord]:
        return sorted(records, key=lambda r: r.sort_order)

    def _to_dict(self, record: TreeRecord) -> Dict[str, Any]:
        data = record.to_dict()
        data.pop("parent_id", None)
        data["permission_ids"] = self.store.link_targets(EntityKind.ROLE, record.id, EntityKind.PERMISSION)
        data["user_count"] = self.store.count_external_references(EntityKind.ROLE, record.id, EntityKind.USER)
        return data

    # ==================== 查询 ====================

    def get_list(
        self,
        name: Optional[str] = None,
        code: Optional[str] = None,
        status: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        records = self.store.fetch_all(EntityKind.ROLE, RecordFilter(name=name, code=code, status=status))
        return [self._to_dict(r) for r in self._sorted(records)]

    def get_page(
        self,
        page: int = 1,
        page_size: int = 10,
        name: Optional[str] = None,
        code: Optional[str] = None,
        status: Optional[int] = None,
    ) -> Page:
        """分页角色列表，只为当前页的角色读取权限和用户数"""
        records = self.store.fetch_all(EntityKind.ROLE, RecordFilter(name=name, code=code, status=status))
        result = paginate(self._sorted(records), page, page_size)
        result.rows = [self._to_dict(r) for r in result.rows]
        return result

    def get(self, role_id: str) -> Dict[str, Any]:
        return self._to_dict(self._require(role_id))

    def get_permission_ids(self, role_id: str) -> List[str]:
        self._require(role_id)
        return self.store.link_targets(EntityKind.ROLE, role_id, EntityKind.PERMISSION)

    # ==================== 变更 ====================

    def create(self, permission_ids: Optional[Sequence[str]] = None, **values: Any) -> Dict[str, Any]:
        with self.store.transaction():
            self._check_unique(values)
            data = {k: v for k, v in values.items() if k in self.editable_fields and v is not None}
            record = TreeRecord(id=str(uuid.uuid4())).evolve(**data)
            record = self.store.insert(EntityKind.ROLE, record)
            if permission_ids:
                self.store.replace_links(
                    EntityKind.ROLE, record.id, EntityKind.PERMISSION, self._check_permissions(permission_ids)
                )
        logger.info(f"创建角色: id={record.id}, code={record.get('code')}")
        return self._to_dict(record)

    def update(self, role_id: str, permission_ids: Optional[Sequence[str]] = None, **changes: Any) -> Dict[str, Any]:
        with self.store.transaction():
            self._require(role_id, for_update=True)
            self._check_unique(changes, exclude_id=role_id)
            data = {
                k: v for k, v in changes.items()
                if k in self.editable_fields and not (v is None and k in self.required_fields)
            }
            record = self.store.update(EntityKind.ROLE, role_id, **data) if data else self._require(role_id)
            if permission_ids is not None:
                self.store.replace_links(
                    EntityKind.ROLE, role_id, EntityKind.PERMISSION, self._check_permissions(permission_ids)
                )
        logger.info(f"更新角色: id={role_id}, fields={sorted(data)}")
        return self._to_dict(record)

    def assign_permissions(self, role_id: str, permission_ids: Sequence[str]) -> List[str]:
        """覆盖角色的权限列表"""
        with self.store.transaction():
            self._require(role_id, for_update=True)
            permission_ids = self._check_permissions(permission_ids)
            self.store.replace_links(EntityKind.ROLE, role_id, EntityKind.PERMISSION, permission_ids)
        logger.info(f"角色分配权限: id={role_id}, count={len(permission_ids)}")
        return permission_ids

    def delete(self, role_id: str) -> Dict[str, Any]:
        """删除角色，存在持有该角色的用户时拒绝"""
        with self.store.transaction():
            record = self._require(role_id, for_update=True)
            user_count = self.store.count_external_references(EntityKind.ROLE, role_id, EntityKind.USER)
            try:
                validate_deletable(TreeNode(record), 0, user_count, reference_kind=EntityKind.USER.value)
            except InUseError as exc:
                logger.warning(f"角色删除被拒绝: {exc!r}")
                raise translate_tree_error(exc, "该角色正在被用户使用，无法删除") from exc
            except TreeError as exc:
                raise translate_tree_error(exc) from exc
            self.store.delete(EntityKind.ROLE, role_id)
        logger.info(f"删除角色: id={role_id}, name={record.name}")
        return {"id": role_id}


__all__ = ["RoleService"]
