"""Pure status reducers for requisition items and headers.

Neither function touches the database; the lifecycle service feeds them the
quantities re-read inside its transaction and persists the result.
"""
from typing import Iterable, NamedTuple

from db.models.requisition import ItemStatus, RequisitionStatus


class ItemLine(NamedTuple):
    requested: int
    fulfilled: int
    returned: int
    consumable: bool = False


def item_status(requested: int, fulfilled: int, returned: int) -> ItemStatus:
    if fulfilled <= 0:
        return ItemStatus.PENDING
    if fulfilled < requested:
        return ItemStatus.PARTIAL
    if returned <= 0:
        return ItemStatus.FULFILLED
    if returned >= fulfilled:
        return ItemStatus.RETURNED
    return ItemStatus.IN_USE


def header_status(lines: Iterable[ItemLine]) -> RequisitionStatus:
    lines = list(lines)
    if not lines or not any(ln.fulfilled > 0 for ln in lines):
        return RequisitionStatus.PENDING

    all_fulfilled = all(ln.fulfilled >= ln.requested for ln in lines)
    # consumables are never returned, so they cannot hold the header in use
    durable = [ln for ln in lines if not ln.consumable]
    in_use = sum(max(0, ln.fulfilled - ln.returned) for ln in durable)
    returns_started = any(ln.returned > 0 for ln in durable)

    if in_use > 0 and returns_started:
        return RequisitionStatus.IN_USE if all_fulfilled else RequisitionStatus.PARTIAL

    all_returned = bool(durable) and all(
        ln.fulfilled > 0 and ln.returned == ln.fulfilled for ln in durable
    )
    if all_returned and all_fulfilled:
        return RequisitionStatus.RETURNED
    return RequisitionStatus.FULFILLED if all_fulfilled else RequisitionStatus.PARTIAL
