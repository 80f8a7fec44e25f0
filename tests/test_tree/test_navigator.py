"""树导航函数测试"""

import gc

import pytest

from mallcore.tree import (
    CycleDetectedError,
    DetachedNodeError,
    TreeNode,
    TreeRecord,
    ancestors,
    build_forest,
    depth,
    descendant_ids,
    filter_forest,
    find_node,
    flatten_forest,
    forest_to_list,
    full_path,
    height,
    is_leaf,
    iter_forest,
    path_ids,
)


@pytest.fixture
def forest(dept_records):
    return build_forest(dept_records)


class TestDepthAndPath:
    """深度与路径"""

    def test_depth(self, forest):
        assert depth(forest.get("1")) == 0
        assert depth(forest.get("2")) == 1
        assert depth(forest.get("4")) == 2

    def test_full_path(self, forest):
        assert full_path(forest.get("4")) == "总部 / 技术部 / 后端组"
        assert full_path(forest.get("1")) == "总部"

    def test_full_path_custom_separator_and_field(self, make_record):
        result = build_forest([
            make_record("1", name="总部", code="HQ"),
            make_record("2", "1", name="技术部", code="TECH"),
        ])
        assert full_path(result.get("2"), separator=">") == "总部>技术部"
        assert full_path(result.get("2"), separator="/", label_field="code") == "HQ/TECH"

    def test_depth_matches_path_length(self, forest):
        for node in iter_forest(forest.roots):
            assert depth(node) == len(full_path(node).split(" / ")) - 1

    def test_ancestors_and_path_ids(self, forest):
        node = forest.get("5")
        assert [n.id for n in ancestors(node)] == ["1", "2"]
        assert path_ids(node) == ["1", "2", "5"]
        assert ancestors(forest.get("1")) == []

    def test_depth_detects_cycle(self):
        """手工连接出环时 depth 报错而不是死循环"""
        a = TreeNode(TreeRecord(id="a"))
        b = TreeNode(TreeRecord(id="b"))
        a.add_child(b)
        b.add_child(a)
        with pytest.raises(CycleDetectedError):
            depth(a)

    def test_depth_max_steps(self, forest):
        with pytest.raises(CycleDetectedError):
            depth(forest.get("4"), max_steps=1)
        assert depth(forest.get("4"), max_steps=forest.size) == 2

    def test_detached_node_raises(self, dept_records):
        """只保留子节点、构建结果被回收后，向上遍历报错而不是把子节点当成根"""
        result = build_forest(dept_records)
        node = result.get("4")
        del result
        gc.collect()

        assert node.is_root is False
        with pytest.raises(DetachedNodeError) as exc_info:
            depth(node)
        assert exc_info.value.record_id == "4"
        assert exc_info.value.parent_id == "2"
        with pytest.raises(DetachedNodeError):
            full_path(node)


class TestDescendants:
    """后代与叶子"""

    def test_descendant_ids_preorder(self, forest):
        assert descendant_ids(forest.get("1")) == ["3", "2", "4", "5"]
        assert descendant_ids(forest.get("2")) == ["4", "5"]

    def test_leaf(self, forest):
        for node in iter_forest(forest.roots):
            if is_leaf(node):
                assert descendant_ids(node) == []
        assert is_leaf(forest.get("4"))
        assert not is_leaf(forest.get("2"))

    def test_height(self, forest):
        assert height(forest.get("1")) == 3
        assert height(forest.get("2")) == 2
        assert height(forest.get("5")) == 1


class TestForestHelpers:
    """森林遍历、查找、过滤、序列化"""

    def test_iter_and_flatten(self, forest):
        ids = [n.id for n in flatten_forest(forest.roots)]
        assert ids == ["1", "3", "2", "4", "5"]
        assert [n.id for n in iter_forest(forest.roots)] == ids

    def test_find_node(self, forest):
        assert find_node(forest.roots, "5") is forest.get("5")
        assert find_node(forest.roots, "x") is None

    def test_filter_keeps_ancestors(self, forest):
        roots = filter_forest(forest.roots, lambda n: "后端" in n.label())
        assert [n.id for n in flatten_forest(roots)] == ["1", "2", "4"]
        # 返回的是副本，原树不受影响
        assert len(forest.get("2").children) == 2

    def test_filter_without_ancestors_lifts_matches(self, forest):
        roots = filter_forest(forest.roots, lambda n: n.id in ("4", "5"), keep_ancestors=False)
        assert [n.id for n in roots] == ["4", "5"]

    def test_filter_no_match(self, forest):
        assert filter_forest(forest.roots, lambda n: False) == []

    def test_forest_to_list(self, forest):
        items = forest_to_list(forest.roots, include_depth=True, include_path=True, include_leaf=True)
        root = items[0]
        assert root["id"] == "1"
        assert root["depth"] == 0
        assert root["is_leaf"] is False
        tech = root["children"][1]
        assert tech["name"] == "技术部"
        assert tech["full_path"] == "总部 / 技术部"
        backend = tech["children"][0]
        assert backend["depth"] == 2
        assert backend["full_path"] == "总部 / 技术部 / 后端组"
        assert backend["children"] == []

    def test_forest_to_list_serializer_and_extras(self, forest):
        items = forest_to_list(
            forest.roots,
            children_field="items",
            serializer=lambda r: {"key": r.id},
            extras=lambda n: {"child_count": len(n.children)},
        )
        assert items == [{
            "key": "1",
            "child_count": 2,
            "items": [
                {"key": "3", "child_count": 0, "items": []},
                {"key": "2", "child_count": 2, "items": [
                    {"key": "4", "child_count": 0, "items": []},
                    {"key": "5", "child_count": 0, "items": []},
                ]},
            ],
        }]
