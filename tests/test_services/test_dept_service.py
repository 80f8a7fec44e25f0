"""部门服务测试"""

import pytest

from mallcore.config import AppSettings, TreeSettings
from mallcore.exceptions import (
    ErrorCode,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from mallcore.services import DepartmentService
from mallcore.tree import CycleError, EntityKind, OrphanRecordError, TreeRecord


@pytest.fixture
def service(memory_store, settings):
    return DepartmentService(memory_store, settings)


class TestDepartmentQuery:

    def test_get_tree(self, service):
        view = service.get_tree()
        assert view.orphans == []
        root = view.items[0]
        assert root["name"] == "总部"
        assert [c["name"] for c in root["children"]] == ["财务部", "技术部"]
        assert root["children"][1]["children"][0]["full_path"] == "总部 / 技术部 / 后端组"
        assert root["user_count"] == 0

    def test_get_tree_name_search_keeps_ancestors(self, service):
        view = service.get_tree(name="前端")
        root = view.items[0]
        assert root["name"] == "总部"
        assert [c["name"] for c in root["children"]] == ["技术部"]
        assert [c["name"] for c in root["children"][0]["children"]] == ["前端组"]

    def test_get_tree_status_filter(self, service, memory_store):
        memory_store.update(EntityKind.DEPARTMENT, "3", status=0)
        view = service.get_tree(status=1)
        assert [c["id"] for c in view.items[0]["children"]] == ["2"]

    def test_get_tree_orphans_reported(self, service, memory_store):
        memory_store.insert(EntityKind.DEPARTMENT, TreeRecord(id="9", parent_id="missing", name="孤立部门"))
        view = service.get_tree()
        assert [r["id"] for r in view.items] == ["9", "1"]
        assert len(view.warnings) == 1

    def test_get_tree_strict_orphans(self, memory_store):
        settings = AppSettings(tree=TreeSettings(strict_orphans=True))
        memory_store.insert(EntityKind.DEPARTMENT, TreeRecord(id="9", parent_id="missing"))
        with pytest.raises(ResourceConflictException) as exc_info:
            DepartmentService(memory_store, settings).get_tree()
        assert exc_info.value.code == ErrorCode.TREE_CORRUPTED
        assert isinstance(exc_info.value.__cause__, OrphanRecordError)

    def test_user_count(self, service, memory_store):
        memory_store.link(EntityKind.USER, "u1", EntityKind.DEPARTMENT, "4")
        tree = service.get_tree().items
        backend = tree[0]["children"][1]["children"][0]
        assert backend["user_count"] == 1

    def test_get_detail(self, service):
        data = service.get("4")
        assert data["depth"] == 2
        assert data["full_path"] == "总部 / 技术部 / 后端组"
        assert data["is_leaf"] is True
        assert data["parent"]["id"] == "2"
        assert data["children"] == []

    def test_get_missing(self, service):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            service.get("99")
        assert exc_info.value.code == ErrorCode.DEPARTMENT_NOT_FOUND

    def test_descendant_ids(self, service):
        assert service.get_descendant_ids("2") == ["4", "5"]

    def test_get_page(self, service):
        page = service.get_page(page=2, page_size=1, name="组")
        assert [r["name"] for r in page.rows] == ["前端组"]
        assert page.total_records == 2
        assert page.total_pages == 2
        assert page.has_prev is True
        assert page.has_next is False
        assert service.get_page(page_size=10).total_records == 5


class TestDepartmentMutation:

    def test_create(self, service, memory_store):
        data = service.create(name="测试组", parent_id="2", sort_order=3, phone="123")
        record = memory_store.get(EntityKind.DEPARTMENT, data["id"])
        assert record.parent_id == "2"
        assert record.get("phone") == "123"

    def test_create_parent_missing(self, service):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            service.create(name="x", parent_id="99")
        assert exc_info.value.message == "父部门不存在"

    def test_create_leader_missing(self, service):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            service.create(name="x", leader_id="nobody")
        assert exc_info.value.message == "部门负责人不存在"

    def test_create_with_leader(self, service, memory_store):
        memory_store.insert(EntityKind.USER, TreeRecord(id="u1", name="admin"))
        data = service.create(name="x", leader_id="u1")
        assert data["leader_id"] == "u1"

    def test_move(self, service, memory_store):
        service.move("4", "3")
        assert memory_store.get(EntityKind.DEPARTMENT, "4").parent_id == "3"
        assert service.get("4")["full_path"] == "总部 / 财务部 / 后端组"

    def test_move_to_root(self, service, memory_store):
        service.move("2", None)
        assert memory_store.get(EntityKind.DEPARTMENT, "2").parent_id is None

    def test_move_under_descendant_rejected(self, service, memory_store):
        with pytest.raises(ValidationException) as exc_info:
            service.move("2", "4")
        assert exc_info.value.code == ErrorCode.CIRCULAR_REFERENCE
        assert exc_info.value.message == "不能选择子部门作为父部门"
        assert isinstance(exc_info.value.__cause__, CycleError)
        # 层级保持不变
        assert memory_store.get(EntityKind.DEPARTMENT, "2").parent_id == "1"

    def test_move_self_parent_rejected(self, service):
        with pytest.raises(ValidationException) as exc_info:
            service.move("2", "2")
        assert exc_info.value.code == ErrorCode.SELF_PARENT
        assert exc_info.value.message == "不能将自己设为父部门"

    def test_update_parent_goes_through_move_checks(self, service, memory_store):
        with pytest.raises(ValidationException):
            service.update("1", name="新总部", parent_id="5")
        # 整个更新回滚，名称也未修改
        assert memory_store.get(EntityKind.DEPARTMENT, "1").name == "总部"

    def test_update_fields(self, service):
        data = service.update("3", name="财务中心", email="fin@example.com")
        assert data["name"] == "财务中心"
        assert data["email"] == "fin@example.com"

    def test_update_ignores_null_required_fields(self, service):
        data = service.update("3", name=None, sort_order=None, status=None, email=None)
        assert data["name"] == "财务部"
        assert data["sort_order"] == 1
        assert data["status"] == 1
        assert data["email"] is None

    def test_depth_limit(self, memory_store):
        settings = AppSettings(tree=TreeSettings(department_max_depth=3))
        service = DepartmentService(memory_store, settings)
        with pytest.raises(ValidationException) as exc_info:
            service.create(name="太深", parent_id="4")
        assert exc_info.value.code == ErrorCode.DEPTH_EXCEEDED
        # 整棵子树一起移动时按子树高度计算
        with pytest.raises(ValidationException):
            service.move("2", "3")

    def test_delete_with_children(self, service):
        with pytest.raises(ResourceConflictException) as exc_info:
            service.delete("2")
        assert exc_info.value.code == ErrorCode.HAS_CHILDREN
        assert exc_info.value.message == "存在子部门，无法删除"

    def test_delete_with_users(self, service, memory_store):
        memory_store.link(EntityKind.USER, "u1", EntityKind.DEPARTMENT, "3")
        with pytest.raises(ResourceConflictException) as exc_info:
            service.delete("3")
        assert exc_info.value.code == ErrorCode.IN_USE
        assert exc_info.value.message == "部门下有员工，无法删除"

    def test_delete(self, service, memory_store):
        assert service.delete("5") == {"id": "5"}
        assert memory_store.get(EntityKind.DEPARTMENT, "5") is None

    def test_delete_missing(self, service):
        with pytest.raises(ResourceNotFoundException):
            service.delete("99")
