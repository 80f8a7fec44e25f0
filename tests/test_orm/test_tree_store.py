"""SQLAlchemy 存储测试"""

import pytest

from mallcore.orm import AdminUser, Department, Product, ProductCategory, Role, Permission
from mallcore.tree import EntityKind, RecordFilter, TreeRecord, build_forest


@pytest.fixture
def seeded(db_session):
    """总部 -> 技术部 -> 后端组，及一个员工、一个角色"""
    hq = Department(id="d1", name="总部", sort_order=1)
    tech = Department(id="d2", name="技术部", parent_id="d1", sort_order=2)
    backend = Department(id="d3", name="后端组", parent_id="d2", sort_order=1)
    user = AdminUser(id="u1", name="admin", department_id="d2")
    db_session.add_all([hq, tech, backend, user])
    db_session.commit()
    return db_session


class TestSqlAlchemyTreeStore:

    def test_fetch_all_builds_tree(self, seeded, sql_store):
        records = sql_store.fetch_all(EntityKind.DEPARTMENT)
        assert {r.id for r in records} == {"d1", "d2", "d3"}
        result = build_forest(records)
        assert [r.id for r in result.roots] == ["d1"]
        assert result.get("d3").parent.id == "d2"

    def test_record_payload(self, seeded, sql_store):
        seeded.get(Department, "d2").phone = "010-1"
        seeded.commit()
        record = sql_store.get(EntityKind.DEPARTMENT, "d2")
        assert record.get("phone") == "010-1"
        assert record.created_at is not None
        assert "updated_at" not in record.payload

    def test_get_missing(self, seeded, sql_store):
        assert sql_store.get(EntityKind.DEPARTMENT, "nope") is None

    def test_count_children_and_references(self, seeded, sql_store):
        assert sql_store.count_children(EntityKind.DEPARTMENT, "d1") == 1
        assert sql_store.count_external_references(EntityKind.DEPARTMENT, "d2", EntityKind.USER) == 1
        assert sql_store.count_external_references(EntityKind.DEPARTMENT, "d3", EntityKind.USER) == 0

    def test_filters(self, seeded, sql_store):
        seeded.get(Department, "d3").status = 0
        seeded.commit()
        enabled = sql_store.fetch_all(EntityKind.DEPARTMENT, RecordFilter(status=1))
        assert {r.id for r in enabled} == {"d1", "d2"}
        named = sql_store.fetch_all(EntityKind.DEPARTMENT, RecordFilter(name="技术"))
        assert [r.id for r in named] == ["d2"]

    def test_insert_update_delete(self, sql_store):
        with sql_store.transaction():
            sql_store.insert(EntityKind.CATEGORY, TreeRecord(id="c1", name="数码").evolve(level=1))
            sql_store.insert(EntityKind.CATEGORY, TreeRecord(id="c2", parent_id="c1", name="手机").evolve(level=2))
        assert sql_store.get(EntityKind.CATEGORY, "c2").get("level") == 2

        with sql_store.transaction():
            updated = sql_store.update(EntityKind.CATEGORY, "c2", parent_id=None, level=1)
        assert updated.parent_id is None
        assert updated.get("level") == 1

        with sql_store.transaction():
            sql_store.delete(EntityKind.CATEGORY, "c2")
        assert sql_store.get(EntityKind.CATEGORY, "c2") is None

    def test_update_missing(self, sql_store):
        with pytest.raises(KeyError):
            sql_store.update(EntityKind.CATEGORY, "nope", name="x")

    def test_product_references(self, db_session, sql_store):
        db_session.add_all([
            ProductCategory(id="c1", name="数码"),
            Product(id="g1", name="手机", category_id="c1"),
            Product(id="g2", name="平板", category_id="c1"),
        ])
        db_session.commit()
        assert sql_store.count_external_references(EntityKind.CATEGORY, "c1", EntityKind.PRODUCT) == 2

    def test_role_permission_links(self, db_session, sql_store):
        db_session.add_all([
            Role(id="r1", name="管理员", code="admin"),
            Permission(id="p1", name="部门管理", code="system:dept", type="MENU"),
            Permission(id="p2", name="新增部门", code="system:dept:add", type="BUTTON", parent_id="p1"),
            Permission(id="p3", name="商品管理", code="product", type="MENU"),
            AdminUser(id="u1", name="admin"),
        ])
        db_session.commit()

        with sql_store.transaction():
            sql_store.replace_links(EntityKind.ROLE, "r1", EntityKind.PERMISSION, ["p1", "p2"])
            sql_store.replace_links(EntityKind.USER, "u1", EntityKind.ROLE, ["r1"])

        assert sql_store.link_targets(EntityKind.ROLE, "r1", EntityKind.PERMISSION) == ["p1", "p2"]
        assert sql_store.count_external_references(EntityKind.PERMISSION, "p1", EntityKind.ROLE) == 1
        assert sql_store.count_external_references(EntityKind.ROLE, "r1", EntityKind.USER) == 1

        granted = sql_store.fetch_all(
            EntityKind.PERMISSION,
            RecordFilter(granted_to_user="u1", type="MENU"),
        )
        assert [r.id for r in granted] == ["p1"]

        with sql_store.transaction():
            sql_store.delete(EntityKind.ROLE, "r1")
        assert sql_store.count_external_references(EntityKind.PERMISSION, "p1", EntityKind.ROLE) == 0
        assert sql_store.link_targets(EntityKind.USER, "u1", EntityKind.ROLE) == []

    def test_fk_link_targets(self, seeded, sql_store):
        assert sql_store.link_targets(EntityKind.USER, "u1", EntityKind.DEPARTMENT) == ["d2"]
        with sql_store.transaction():
            sql_store.replace_links(EntityKind.USER, "u1", EntityKind.DEPARTMENT, ["d3"])
        assert sql_store.count_external_references(EntityKind.DEPARTMENT, "d3", EntityKind.USER) == 1

    def test_transaction_rollback(self, seeded, sql_store):
        with pytest.raises(RuntimeError):
            with sql_store.transaction():
                sql_store.update(EntityKind.DEPARTMENT, "d3", parent_id="d1")
                raise RuntimeError("boom")
        assert sql_store.get(EntityKind.DEPARTMENT, "d3").parent_id == "d2"

    def test_unsupported_link(self, sql_store):
        with pytest.raises(ValueError):
            sql_store.link_targets(EntityKind.CATEGORY, "c1", EntityKind.USER)
