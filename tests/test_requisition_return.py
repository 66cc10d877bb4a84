import unittest

from configs import db
from dao import inventory as inv_dao
from dao import requisition as req_dao
from dao.session import atomic
from db.models.inventory import StockMovement
from db.models.material import Material
from db.models.requisition import (
    ItemStatus,
    RequisitionItem,
    RequisitionStatus,
    ReturnCondition,
)
from errors import (
    CapacityExceededError,
    ConsumableMaterialError,
    ForbiddenError,
    SellableMaterialError,
    ValidationError,
)
from services import requisition as svc
from tests.base import AppTestCase
from utils.auth import EDIT_REQUISITIONS, Grant


class ReturnItemsTest(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.balls = self.make_category("Sports", "Balls")
        self.paper = self.make_category("Stationery", "Paper")
        self.football = self.make_material(self.balls, "Football", stock=50)
        self.ream = self.make_material(self.paper, "A4 ream", stock=20, consumable=True)
        self.teacher = self.make_user("teacher")
        self.keeper = self.make_user("keeper")
        self.boss = self.actor(self.keeper, self.global_grant())

        self.req = svc.create_requisition(
            self.teacher.id,
            [
                {"material_id": self.football.id, "quantity": 5},
                {"material_id": self.ream.id, "quantity": 4},
            ],
        )
        self.ball_item, self.ream_item = [it.id for it in self.req.items]
        svc.fulfill(
            self.req.id,
            self.boss,
            [
                {"item_id": self.ball_item, "quantity": 5},
                {"item_id": self.ream_item, "quantity": 4},
            ],
        )

    def _item(self, item_id: int) -> RequisitionItem:
        return db.session.get(RequisitionItem, item_id)

    def test_consumables_finish_as_fulfilled(self) -> None:
        req = svc.return_items(
            self.req.id, self.boss, [{"item_id": self.ball_item, "quantity": 5}]
        )
        self.assertEqual(req.status, RequisitionStatus.RETURNED)
        self.assertEqual(self._item(self.ream_item).status, ItemStatus.FULFILLED)

    def test_consumable_return_refused(self) -> None:
        with self.assertRaises(ConsumableMaterialError):
            svc.return_items(
                self.req.id, self.boss, [{"item_id": self.ream_item, "quantity": 1}]
            )
        self.assertEqual(self._item(self.ream_item).returned_qty, 0)
        self.assertEqual(db.session.get(Material, self.ream.id).stock, 16)

    def test_sellable_return_refused(self) -> None:
        self.app.config["ALLOW_SELLABLE_FULFILLMENT"] = True
        snacks = self.make_category("Cafeteria", "Snacks")
        bar = self.make_material(snacks, "Cereal bar", stock=30, sellable=True)
        req = svc.create_requisition(
            self.teacher.id, [{"material_id": bar.id, "quantity": 2}]
        )
        item_id = req.items[0].id
        seller = self.actor(self.keeper, self.sales_grant())
        svc.fulfill(req.id, seller, [{"item_id": item_id, "quantity": 2}])
        with self.assertRaises(SellableMaterialError):
            svc.return_items(req.id, seller, [{"item_id": item_id, "quantity": 1}])
        self.assertEqual(db.session.get(Material, bar.id).stock, 28)

    def test_condition_and_notes_are_recorded(self) -> None:
        svc.return_items(
            self.req.id,
            self.boss,
            [
                {
                    "item_id": self.ball_item,
                    "quantity": 2,
                    "condition": "damaged",
                    "notes": "torn seam",
                }
            ],
        )
        item = self._item(self.ball_item)
        self.assertEqual(item.returned_qty, 2)
        self.assertEqual(item.return_condition, ReturnCondition.DAMAGED)
        self.assertEqual(item.return_notes, "torn seam")
        self.assertIsNotNone(item.returned_at)

    def test_overlong_notes_rejected(self) -> None:
        line = {"item_id": self.ball_item, "quantity": 1, "notes": "n" * 300}
        with self.assertRaises(ValidationError):
            svc.return_items(self.req.id, self.boss, [line])
        self.assertEqual(self._item(self.ball_item).returned_qty, 0)

        line["notes"] = "n" * 255
        svc.return_items(self.req.id, self.boss, [line])
        self.assertEqual(self._item(self.ball_item).return_notes, "n" * 255)

    def test_guarded_update_rejects_overflow(self) -> None:
        stale = self._item(self.ball_item)
        svc.return_items(
            self.req.id, self.boss, [{"item_id": self.ball_item, "quantity": 4}]
        )
        with self.assertRaises(CapacityExceededError):
            with atomic():
                req_dao.bump_returned(stale, 2)
        self.assertEqual(self._item(self.ball_item).returned_qty, 4)
        self.assertEqual(db.session.get(Material, self.football.id).stock, 49)

    def test_invalid_condition(self) -> None:
        with self.assertRaises(ValidationError):
            svc.return_items(
                self.req.id,
                self.boss,
                [{"item_id": self.ball_item, "quantity": 1, "condition": "soggy"}],
            )
        self.assertEqual(self._item(self.ball_item).returned_qty, 0)

    def test_cannot_return_more_than_in_use(self) -> None:
        svc.return_items(
            self.req.id, self.boss, [{"item_id": self.ball_item, "quantity": 3}]
        )
        with self.assertRaises(CapacityExceededError) as cm:
            svc.return_items(
                self.req.id, self.boss, [{"item_id": self.ball_item, "quantity": 3}]
            )
        self.assertEqual(cm.exception.payload["limit"], 2)
        self.assertEqual(self._item(self.ball_item).returned_qty, 3)
        self.assertEqual(db.session.get(Material, self.football.id).stock, 48)
        self.assertEqual(
            inv_dao.net_out_by_material(self.req.id),
            {self.football.id: 2, self.ream.id: 4},
        )

    def test_category_scope_enforced(self) -> None:
        paper_keeper = self.actor(self.keeper, self.category_grant(self.paper.category_id))
        with self.assertRaises(ForbiddenError):
            svc.return_items(
                self.req.id, paper_keeper, [{"item_id": self.ball_item, "quantity": 1}]
            )
        sports_keeper = self.actor(self.keeper, self.category_grant(self.balls.category_id))
        svc.return_items(
            self.req.id, sports_keeper, [{"item_id": self.ball_item, "quantity": 1}]
        )
        self.assertEqual(self._item(self.ball_item).returned_qty, 1)

    def test_editor_cannot_take_returns(self) -> None:
        editor = self.actor(self.keeper, Grant(EDIT_REQUISITIONS))
        with self.assertRaises(ForbiddenError):
            svc.return_items(
                self.req.id, editor, [{"item_id": self.ball_item, "quantity": 1}]
            )
        self.assertEqual(StockMovement.query.filter_by(quantity=1).count(), 0)


if __name__ == "__main__":
    unittest.main()
