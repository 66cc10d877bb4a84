import unittest

from errors import ForbiddenError
from utils.auth import (
    EDIT_REQUISITIONS,
    MANAGE_CATEGORY,
    MANAGE_SALES,
    Actor,
    Grant,
    authorize_category,
    authorize_sellable,
    resolve_scope,
)


class ResolveScopeTest(unittest.TestCase):
    def test_no_grants(self) -> None:
        ctx = resolve_scope([])
        self.assertFalse(ctx.has_global)
        self.assertEqual(ctx.allowed_category_ids, frozenset())
        self.assertFalse(ctx.has_sales_capability)
        self.assertFalse(ctx.is_editor)

    def test_unscoped_manage_grant_is_global(self) -> None:
        ctx = resolve_scope([Grant(MANAGE_CATEGORY)])
        self.assertTrue(ctx.has_global)
        self.assertTrue(ctx.can_manage(99))
        self.assertTrue(ctx.can_manage(None))

    def test_category_grants_collect_ids(self) -> None:
        ctx = resolve_scope(
            [
                Grant(MANAGE_CATEGORY, "category", 5),
                Grant(MANAGE_CATEGORY, "category", 8),
                Grant(MANAGE_SALES),
            ]
        )
        self.assertFalse(ctx.has_global)
        self.assertEqual(ctx.allowed_category_ids, frozenset({5, 8}))
        self.assertTrue(ctx.has_sales_capability)
        self.assertTrue(ctx.can_manage(5))
        self.assertFalse(ctx.can_manage(7))
        self.assertFalse(ctx.can_manage(None))

    def test_other_resource_types_are_ignored(self) -> None:
        ctx = resolve_scope([Grant(MANAGE_CATEGORY, "school", 5)])
        self.assertEqual(ctx.allowed_category_ids, frozenset())
        self.assertFalse(ctx.has_global)

    def test_editor_sees_everything(self) -> None:
        ctx = Actor(id=1, grants=(Grant(EDIT_REQUISITIONS),)).scope
        self.assertTrue(ctx.is_editor)
        self.assertTrue(ctx.sees_everything)


class AuthorizeTest(unittest.TestCase):
    def test_category_denied_names_category(self) -> None:
        ctx = resolve_scope([Grant(MANAGE_CATEGORY, "category", 5)])
        with self.assertRaises(ForbiddenError) as cm:
            authorize_category(ctx, 7, item_id=3)
        self.assertEqual(cm.exception.payload["category_id"], 7)
        self.assertEqual(cm.exception.payload["item_id"], 3)
        self.assertEqual(cm.exception.http_status, 403)

    def test_editor_passes_only_when_allowed(self) -> None:
        ctx = resolve_scope([Grant(EDIT_REQUISITIONS)])
        authorize_category(ctx, 7, allow_editor=True)
        with self.assertRaises(ForbiddenError):
            authorize_category(ctx, 7)

    def test_sellable_requires_sales(self) -> None:
        with self.assertRaises(ForbiddenError):
            authorize_sellable(resolve_scope([Grant(MANAGE_CATEGORY)]), 1, "Cereal bar")
        authorize_sellable(resolve_scope([Grant(MANAGE_SALES)]), 1, "Cereal bar")


if __name__ == "__main__":
    unittest.main()
