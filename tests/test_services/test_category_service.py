"""商品分类服务测试"""

import pytest

from mallcore.config import AppSettings, TreeSettings
from mallcore.exceptions import (
    ErrorCode,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from mallcore.services import ProductCategoryService
from mallcore.tree import EntityKind, MemoryTreeStore


@pytest.fixture
def store():
    return MemoryTreeStore()


@pytest.fixture
def service(store, settings):
    return ProductCategoryService(store, settings)


@pytest.fixture
def digital(service):
    """数码 -> 手机 -> 智能手机（三级）"""
    root = service.create(name="数码", sort_order=1)
    phone = service.create(name="手机", parent_id=root["id"])
    smart = service.create(name="智能手机", parent_id=phone["id"])
    return root, phone, smart


class TestCategoryCreate:

    def test_level_assigned(self, digital):
        root, phone, smart = digital
        assert root["level"] == 1
        assert phone["level"] == 2
        assert smart["level"] == 3

    def test_max_depth(self, service, digital):
        _, _, smart = digital
        with pytest.raises(ValidationException) as exc_info:
            service.create(name="四级", parent_id=smart["id"])
        assert exc_info.value.code == ErrorCode.DEPTH_EXCEEDED
        assert exc_info.value.message == "分类层级不能超过3级"

    def test_configurable_depth(self, store):
        service = ProductCategoryService(store, AppSettings(tree=TreeSettings(category_max_depth=1)))
        root = service.create(name="数码")
        with pytest.raises(ValidationException) as exc_info:
            service.create(name="手机", parent_id=root["id"])
        assert exc_info.value.message == "分类层级不能超过1级"

    def test_parent_missing(self, service):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            service.create(name="手机", parent_id="missing")
        assert exc_info.value.message == "父分类不存在"
        assert exc_info.value.code == ErrorCode.PARENT_NOT_FOUND

    def test_sibling_name_unique(self, service, digital):
        root, _, _ = digital
        with pytest.raises(ResourceConflictException) as exc_info:
            service.create(name="手机", parent_id=root["id"])
        assert exc_info.value.message == "同级分类名称已存在"
        # 不同层级可以同名
        service.create(name="手机")


class TestCategoryMove:

    def test_move_recomputes_levels(self, service, store, digital):
        root, phone, smart = digital
        service.move(phone["id"], None)
        assert store.get(EntityKind.CATEGORY, phone["id"]).get("level") == 1
        assert store.get(EntityKind.CATEGORY, smart["id"]).get("level") == 2

    def test_move_subtree_depth_checked(self, service, digital):
        root, phone, smart = digital
        other = service.create(name="家电")
        child = service.create(name="大家电", parent_id=other["id"])
        # 手机子树高度 2，放到第 2 层下会到第 4 层
        with pytest.raises(ValidationException):
            service.move(phone["id"], child["id"])
        service.move(phone["id"], other["id"])
        assert service.get(smart["id"])["level"] == 3

    def test_move_under_own_descendant(self, service, digital):
        root, _, smart = digital
        with pytest.raises(ValidationException) as exc_info:
            service.move(root["id"], smart["id"])
        assert exc_info.value.message == "不能将分类移动到其子分类下"

    def test_move_to_self(self, service, digital):
        root, _, _ = digital
        with pytest.raises(ValidationException) as exc_info:
            service.update(root["id"], parent_id=root["id"])
        assert exc_info.value.message == "不能将分类设置为自己的子分类"

    def test_rename_to_sibling_name(self, service, digital):
        root, phone, _ = digital
        tablet = service.create(name="平板", parent_id=root["id"])
        with pytest.raises(ResourceConflictException):
            service.update(tablet["id"], name="手机")
        # 改成自己的名字不冲突
        service.update(phone["id"], name="手机", sort_order=3)


class TestCategoryQueryAndDelete:

    def test_get_children(self, service, digital):
        root, phone, _ = digital
        camera = service.create(name="相机", parent_id=root["id"], sort_order=5)
        children = service.get_children(root["id"])
        assert [c["id"] for c in children] == [phone["id"], camera["id"]]
        assert [c["id"] for c in service.get_children()] == [root["id"]]

    def test_get_children_missing_parent(self, service):
        with pytest.raises(ResourceNotFoundException):
            service.get_children("missing")

    def test_update_sort(self, service, store, digital):
        root, phone, _ = digital
        assert service.update_sort([{"id": root["id"], "sort_order": 9}, {"id": phone["id"], "sort_order": 7}]) == 2
        assert store.get(EntityKind.CATEGORY, root["id"]).sort_order == 9

    def test_update_sort_missing_rolls_back(self, service, store, digital):
        root, _, _ = digital
        with pytest.raises(ResourceNotFoundException):
            service.update_sort([{"id": root["id"], "sort_order": 9}, {"id": "missing", "sort_order": 1}])
        assert store.get(EntityKind.CATEGORY, root["id"]).sort_order == 1

    def test_delete_with_children(self, service, digital):
        root, _, _ = digital
        with pytest.raises(ResourceConflictException) as exc_info:
            service.delete(root["id"])
        assert exc_info.value.message == "该分类下存在子分类，不能删除"

    def test_delete_with_products(self, service, store, digital):
        _, _, smart = digital
        store.link(EntityKind.PRODUCT, "g1", EntityKind.CATEGORY, smart["id"])
        with pytest.raises(ResourceConflictException) as exc_info:
            service.delete(smart["id"])
        assert exc_info.value.code == ErrorCode.IN_USE
        assert exc_info.value.message == "该分类下存在商品，不能删除"

    def test_delete_leaf(self, service, store, digital):
        _, _, smart = digital
        service.delete(smart["id"])
        assert store.get(EntityKind.CATEGORY, smart["id"]) is None
