"""
商品分类服务

- 层级上限（默认 3 级，settings.tree.category_max_depth）
- 同级分类名称唯一
- level 字段持久化，移动时整棵子树重新计算
- 删除时检查子分类和分类下的商品
"""

from typing import Any, Dict, List, Optional, Sequence

from mallcore.exceptions import Err, ErrorCode
from mallcore.log import get_logger
from mallcore.tree import (
    CycleError,
    DepthExceededError,
    EntityKind,
    HasChildrenError,
    InUseError,
    RecordFilter,
    SelfParentError,
    TreeNode,
    TreeRecord,
)

from .tree_service import BaseTreeService

logger = get_logger()


class ProductCategoryService(BaseTreeService):
    """商品分类服务

    使用示例:
        service = ProductCategoryService(store, settings)
        root = service.create(name="数码")
        service.create(name="手机", parent_id=root["id"])   # level = 2
        service.update_sort([{"id": root["id"], "sort_order": 5}])
    """

    kind = EntityKind.CATEGORY
    entity_label = "商品分类"
    not_found_code = ErrorCode.CATEGORY_NOT_FOUND
    reference_kind = EntityKind.PRODUCT
    parent_not_found_message = "父分类不存在"
    editable_fields = ("name", "icon", "description", "sort_order", "status")
    error_messages = {
        SelfParentError: "不能将分类设置为自己的子分类",
        CycleError: "不能将分类移动到其子分类下",
        DepthExceededError: "分类层级不能超过{max_depth}级",
        HasChildrenError: "该分类下存在子分类，不能删除",
        InUseError: "该分类下存在商品，不能删除",
    }

    def validate_fields(
        self,
        values: Dict[str, Any],
        records: List[TreeRecord],
        current: Optional[TreeRecord] = None,
    ) -> None:
        if current is None:
            name = values.get("name")
            parent_id = values.get("parent_id") or None
        else:
            if "name" not in values and "parent_id" not in values:
                return
            name = values.get("name") or current.name
            parent_id = (values["parent_id"] or None) if "parent_id" in values else current.parent_id
        exclude_id = current.id if current is not None else None
        for record in records:
            if record.id != exclude_id and record.parent_id == parent_id and record.name == name:
                raise Err.conflict("同级分类名称已存在", code=ErrorCode.DUPLICATE_ENTRY, field="name")

    def before_insert(self, values: Dict[str, Any], parent_levels: int) -> Dict[str, Any]:
        values["level"] = parent_levels + 1
        return values

    def after_move(self, node: TreeNode, parent_levels: int) -> None:
        """重新计算被移动子树的 level"""
        stack = [(node, parent_levels + 1)]
        while stack:
            current, level = stack.pop()
            if current.record.get("level") != level:
                self.store.update(self.kind, current.id, level=level)
            stack.extend((child, level + 1) for child in current.children)

    def get_children(self, parent_id: Optional[str] = None, status: Optional[int] = None) -> List[Dict[str, Any]]:
        """直接子分类，parent_id 为空时返回根分类"""
        parent_id = parent_id or None
        if parent_id is not None:
            self._require(parent_id)
        records = self.store.fetch_all(self.kind, RecordFilter(status=status))
        children = [r for r in records if r.parent_id == parent_id]
        return [r.to_dict() for r in sorted(children, key=lambda r: r.sort_order)]

    def update_sort(self, items: Sequence[Dict[str, Any]]) -> int:
        """批量更新排序

        Args:
            items: [{"id": ..., "sort_order": ...}, ...]

        Returns:
            更新的记录数
        """
        with self.store.transaction():
            for item in items:
                self._require(item["id"], for_update=True)
                self.store.update(self.kind, item["id"], sort_order=item["sort_order"])
        logger.info(f"批量更新分类排序: {len(items)} 条")
        return len(items)


__all__ = ["ProductCategoryService"]
