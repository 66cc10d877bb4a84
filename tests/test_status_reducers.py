import unittest

from db.models.requisition import ItemStatus, RequisitionStatus
from services.status import ItemLine, header_status, item_status


class ItemStatusTest(unittest.TestCase):
    def test_nothing_issued_is_pending(self) -> None:
        self.assertEqual(item_status(10, 0, 0), ItemStatus.PENDING)

    def test_partly_issued_is_partial(self) -> None:
        self.assertEqual(item_status(10, 4, 0), ItemStatus.PARTIAL)
        self.assertEqual(item_status(10, 4, 4), ItemStatus.PARTIAL)

    def test_fully_issued_without_returns(self) -> None:
        self.assertEqual(item_status(10, 10, 0), ItemStatus.FULFILLED)

    def test_partly_returned_is_in_use(self) -> None:
        self.assertEqual(item_status(10, 10, 4), ItemStatus.IN_USE)

    def test_fully_returned(self) -> None:
        self.assertEqual(item_status(10, 10, 10), ItemStatus.RETURNED)


class HeaderStatusTest(unittest.TestCase):
    def test_empty_or_untouched_is_pending(self) -> None:
        self.assertEqual(header_status([]), RequisitionStatus.PENDING)
        self.assertEqual(
            header_status([ItemLine(5, 0, 0), ItemLine(3, 0, 0)]),
            RequisitionStatus.PENDING,
        )

    def test_issue_then_return_walkthrough(self) -> None:
        self.assertEqual(
            header_status([ItemLine(10, 10, 0)]), RequisitionStatus.FULFILLED
        )
        self.assertEqual(header_status([ItemLine(10, 10, 4)]), RequisitionStatus.IN_USE)
        self.assertEqual(
            header_status([ItemLine(10, 10, 10)]), RequisitionStatus.RETURNED
        )

    def test_partial_issue(self) -> None:
        self.assertEqual(
            header_status([ItemLine(10, 5, 0), ItemLine(2, 0, 0)]),
            RequisitionStatus.PARTIAL,
        )

    def test_in_use_with_incomplete_issue_is_partial(self) -> None:
        self.assertEqual(
            header_status([ItemLine(10, 10, 3), ItemLine(4, 1, 0)]),
            RequisitionStatus.PARTIAL,
        )

    def test_consumables_do_not_block_returned(self) -> None:
        lines = [ItemLine(2, 2, 2), ItemLine(100, 100, 0, consumable=True)]
        self.assertEqual(header_status(lines), RequisitionStatus.RETURNED)

    def test_consumables_do_not_hold_in_use(self) -> None:
        lines = [ItemLine(2, 2, 1), ItemLine(100, 100, 0, consumable=True)]
        self.assertEqual(header_status(lines), RequisitionStatus.IN_USE)

    def test_only_consumables_fully_issued_is_fulfilled(self) -> None:
        lines = [ItemLine(5, 5, 0, consumable=True)]
        self.assertEqual(header_status(lines), RequisitionStatus.FULFILLED)

    def test_one_durable_returned_other_still_out_is_in_use(self) -> None:
        lines = [ItemLine(2, 2, 2), ItemLine(3, 3, 0)]
        self.assertEqual(header_status(lines), RequisitionStatus.IN_USE)


if __name__ == "__main__":
    unittest.main()
