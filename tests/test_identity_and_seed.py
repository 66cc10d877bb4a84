import unittest

from flask_login import login_user

from dao import user as user_dao
from db.models.category import Category
from db.models.material import Material
from db.models.user import PermissionTemplate, User, UserGrant
from errors import ForbiddenError
from tests.base import AppTestCase
from utils.auth import MANAGE_CATEGORY, MANAGE_SALES, Grant, current_actor


class CurrentActorTest(AppTestCase):
    def test_actor_from_logged_in_user(self) -> None:
        user = self.make_user(
            "sports1", grants=[(MANAGE_CATEGORY, "category", 3), (MANAGE_SALES,)]
        )
        with self.app.test_request_context():
            login_user(user)
            actor = current_actor()
        self.assertEqual(actor.id, user.id)
        self.assertEqual(
            set(actor.grants),
            {Grant(MANAGE_CATEGORY, "category", 3), Grant(MANAGE_SALES)},
        )
        self.assertEqual(actor.scope.allowed_category_ids, frozenset({3}))
        self.assertTrue(actor.scope.has_sales_capability)

    def test_anonymous_is_rejected(self) -> None:
        with self.app.test_request_context():
            with self.assertRaises(ForbiddenError) as cm:
                current_actor()
        self.assertEqual(cm.exception.http_status, 401)

    def test_user_loader(self) -> None:
        user = self.make_user("teacher")
        self.assertEqual(self.app.login_manager._user_callback(str(user.id)), user)


class SeedTest(AppTestCase):
    def test_seed_command_is_idempotent(self) -> None:
        runner = self.app.test_cli_runner()
        first = runner.invoke(args=["seed"])
        self.assertEqual(first.exit_code, 0, first.output)
        self.assertIn("Seed data loaded.", first.output)
        counts = (
            Category.query.count(),
            Material.query.count(),
            User.query.count(),
            UserGrant.query.count(),
            PermissionTemplate.query.count(),
        )
        runner.invoke(args=["seed"])
        self.assertEqual(
            counts,
            (
                Category.query.count(),
                Material.query.count(),
                User.query.count(),
                UserGrant.query.count(),
                PermissionTemplate.query.count(),
            ),
        )

    def test_seeded_storekeeper_is_category_scoped(self) -> None:
        self.app.test_cli_runner().invoke(args=["seed"])
        sports = Category.query.filter_by(name="Sports").one()
        keeper = User.query.filter_by(username="sports1").one()
        self.assertEqual(
            user_dao.grants_of(keeper), [Grant(MANAGE_CATEGORY, "category", sports.id)]
        )
        admin = User.query.filter_by(username="admin").one()
        self.assertEqual(user_dao.grants_of(admin), [Grant(MANAGE_CATEGORY)])


if __name__ == "__main__":
    unittest.main()
