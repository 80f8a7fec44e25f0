"""角色服务测试"""

import pytest

from mallcore.exceptions import (
    ErrorCode,
    ResourceConflictException,
    ResourceNotFoundException,
)
from mallcore.services import RoleService
from mallcore.tree import EntityKind, MemoryTreeStore, TreeRecord


@pytest.fixture
def store():
    store = MemoryTreeStore()
    for pid in ("p1", "p2", "p3"):
        store.insert(EntityKind.PERMISSION, TreeRecord(id=pid, name=pid, payload={"code": f"code:{pid}"}))
    return store


@pytest.fixture
def service(store, settings):
    return RoleService(store, settings)


@pytest.fixture
def admin(service):
    return service.create(name="管理员", code="admin", sort_order=1, permission_ids=["p1", "p2"])


class TestRoleCreate:

    def test_create_with_permissions(self, admin):
        assert admin["code"] == "admin"
        assert admin["permission_ids"] == ["p1", "p2"]
        assert admin["user_count"] == 0
        assert "parent_id" not in admin

    def test_duplicate_code(self, service, admin):
        with pytest.raises(ResourceConflictException) as exc_info:
            service.create(name="另一个", code="admin")
        assert exc_info.value.message == "角色编码已存在"
        assert exc_info.value.code == ErrorCode.DUPLICATE_ENTRY

    def test_duplicate_name(self, service, admin):
        with pytest.raises(ResourceConflictException) as exc_info:
            service.create(name="管理员", code="admin2")
        assert exc_info.value.message == "角色名称已存在"

    def test_missing_permission_rolls_back(self, service, store):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            service.create(name="运营", code="operator", permission_ids=["p1", "p9"])
        assert exc_info.value.message == "部分权限不存在"
        assert exc_info.value.details == ["权限不存在: p9"]
        assert store.fetch_all(EntityKind.ROLE) == []


class TestRoleUpdate:

    def test_update_fields(self, service, admin):
        updated = service.update(admin["id"], description="系统管理员")
        assert updated["description"] == "系统管理员"
        assert updated["permission_ids"] == ["p1", "p2"]

    def test_update_replaces_permissions(self, service, admin):
        updated = service.update(admin["id"], permission_ids=["p3"])
        assert updated["permission_ids"] == ["p3"]

    def test_update_ignores_null_required_fields(self, service, admin):
        updated = service.update(admin["id"], name=None, code=None, sort_order=None, description=None)
        assert updated["name"] == "管理员"
        assert updated["code"] == "admin"
        assert updated["sort_order"] == 1
        assert updated["description"] is None

    def test_update_duplicate_name(self, service, admin):
        other = service.create(name="运营", code="operator")
        with pytest.raises(ResourceConflictException):
            service.update(other["id"], name="管理员")
        # 保留自身名称不算冲突
        service.update(admin["id"], name="管理员")

    def test_update_missing(self, service):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            service.update("missing", name="x")
        assert exc_info.value.code == ErrorCode.ROLE_NOT_FOUND

    def test_assign_permissions(self, service, admin):
        assert service.assign_permissions(admin["id"], ["p3", "p3", "p1"]) == ["p3", "p1"]
        assert service.get_permission_ids(admin["id"]) == ["p1", "p3"]

    def test_assign_empty(self, service, admin):
        service.assign_permissions(admin["id"], [])
        assert service.get(admin["id"])["permission_ids"] == []


class TestRoleQueryAndDelete:

    def test_get_list_filters(self, service, admin):
        service.create(name="运营", code="operator", sort_order=0, status=0)
        assert [r["code"] for r in service.get_list()] == ["operator", "admin"]
        assert [r["code"] for r in service.get_list(status=1)] == ["admin"]
        assert [r["code"] for r in service.get_list(code="oper")] == ["operator"]

    def test_delete_in_use(self, service, store, admin):
        store.link(EntityKind.USER, "u1", EntityKind.ROLE, admin["id"])
        assert service.get(admin["id"])["user_count"] == 1
        with pytest.raises(ResourceConflictException) as exc_info:
            service.delete(admin["id"])
        assert exc_info.value.code == ErrorCode.IN_USE
        assert exc_info.value.message == "该角色正在被用户使用，无法删除"

    def test_delete_removes_links(self, service, store, admin):
        assert service.delete(admin["id"]) == {"id": admin["id"]}
        assert store.get(EntityKind.ROLE, admin["id"]) is None
        assert store.count_external_references(EntityKind.PERMISSION, "p1", EntityKind.ROLE) == 0

    def test_get_page(self, service, admin):
        for index in range(4):
            service.create(name=f"角色{index}", code=f"role{index}", sort_order=index + 2)

        first = service.get_page(page=1, page_size=2)
        assert first.total_records == 5
        assert first.total_pages == 3
        assert [r["code"] for r in first.rows] == ["admin", "role0"]
        assert first.rows[0]["permission_ids"] == ["p1", "p2"]
        assert first.has_prev is False
        assert first.has_next is True

        last = service.get_page(page=3, page_size=2, code="role")
        assert last.total_records == 4
        assert last.rows == []
        assert last.has_next is False
