# dao/requisition.py
from typing import Dict, Iterable, List, Optional, Set
from uuid import uuid4

from flask import current_app
from sqlalchemy import update
from sqlalchemy.orm import selectinload
from configs import db
from dao import archive as archive_dao
from db.models.archive import ArchiveAction
from db.models.requisition import (
    DecisionKind,
    ItemStatus,
    Requisition,
    RequisitionDecision,
    RequisitionItem,
    RequisitionStatus,
)
from errors import CapacityExceededError, NotFoundError
from utils.clock import utcnow

TABLE = Requisition.__tablename__


def format_code(req_id: int) -> str:
    prefix = current_app.config.get("REQUISITION_CODE_PREFIX", "REQ")
    width = int(current_app.config.get("REQUISITION_CODE_WIDTH", 6))
    return f"{prefix}-{int(req_id):0{width}d}"


# ---------- reads ----------
def get_requisition(req_id: int, lock: bool = False) -> Optional[Requisition]:
    q = Requisition.query.filter(Requisition.id == int(req_id))
    if lock:
        q = q.with_for_update().populate_existing()
    return q.one_or_none()


def get_requisition_or_404(req_id: int, lock: bool = False) -> Requisition:
    req = get_requisition(req_id, lock=lock)
    if req is None:
        raise NotFoundError(
            f"Requisition {req_id} not found.", requisition_id=int(req_id)
        )
    return req


def lock_items(req_id: int, item_ids: Iterable[int]) -> Dict[int, RequisitionItem]:
    """Re-read the items inside the transaction, row-locked where supported."""
    ids = list(set(int(x) for x in item_ids))
    if not ids:
        return {}
    rows = (
        RequisitionItem.query.filter(
            RequisitionItem.requisition_id == int(req_id),
            RequisitionItem.id.in_(ids),
        )
        .with_for_update()
        .populate_existing()
        .all()
    )
    return {it.id: it for it in rows}


def all_ids() -> Set[int]:
    return {rid for (rid,) in db.session.query(Requisition.id).all()}


def ids_for_requester(user_id: int) -> Set[int]:
    return {
        rid
        for (rid,) in db.session.query(Requisition.id)
        .filter(Requisition.requester_id == int(user_id))
        .all()
    }


def ids_with_materials(material_ids: Iterable[int]) -> Set[int]:
    material_ids = list(set(int(x) for x in material_ids if x is not None))
    if not material_ids:
        return set()
    return {
        rid
        for (rid,) in db.session.query(RequisitionItem.requisition_id)
        .filter(RequisitionItem.material_id.in_(material_ids))
        .distinct()
        .all()
    }


def load_many(
    req_ids: Iterable[int], include_items=False, include_decisions=False
) -> List[Requisition]:
    req_ids = list(set(int(x) for x in req_ids))
    if not req_ids:
        return []
    q = Requisition.query.filter(Requisition.id.in_(req_ids)).options(
        selectinload(Requisition.requester)
    )
    if include_items:
        q = q.options(selectinload(Requisition.items))
    if include_decisions:
        q = q.options(selectinload(Requisition.decisions))
    return q.order_by(Requisition.id.desc()).all()


# ---------- writes ----------
def insert_requisition(
    requester_id: int,
    needed_at=None,
    delivery_location: str | None = None,
    justification: str | None = None,
    notes: str | None = None,
) -> Requisition:
    """Insert the header and assign its code in the same flush cycle."""
    req = Requisition(
        code=f"TMP-{uuid4().hex[:24]}",
        requester_id=int(requester_id),
        status=RequisitionStatus.PENDING,
        needed_at=needed_at,
        delivery_location=delivery_location or None,
        justification=justification or None,
        notes=notes or None,
    )
    db.session.add(req)
    db.session.flush()  # need req.id
    req.code = format_code(req.id)
    db.session.flush()
    return req


def add_item(
    req: Requisition, material_id: int | None, description: str | None, qty: int
) -> RequisitionItem:
    item = RequisitionItem(
        requisition=req,
        material_id=material_id,
        description=description,
        requested_qty=int(qty),
        fulfilled_qty=0,
        returned_qty=0,
        status=ItemStatus.PENDING,
    )
    db.session.add(item)
    return item


def bump_fulfilled(item: RequisitionItem, qty: int) -> None:
    """fulfilled += qty, only while it stays <= requested."""
    db.session.flush()
    res = db.session.execute(
        update(RequisitionItem)
        .where(
            RequisitionItem.id == item.id,
            RequisitionItem.fulfilled_qty + qty <= RequisitionItem.requested_qty,
        )
        .values(fulfilled_qty=RequisitionItem.fulfilled_qty + qty)
        .execution_options(synchronize_session=False)
    )
    db.session.refresh(item)
    if res.rowcount != 1:
        raise CapacityExceededError(
            f"Quantity {qty} exceeds the remaining {item.remaining_qty} of item {item.id}.",
            item_id=item.id,
            requested=qty,
            limit=item.remaining_qty,
        )


def bump_returned(item: RequisitionItem, qty: int) -> None:
    """returned += qty, only while it stays <= fulfilled."""
    db.session.flush()
    res = db.session.execute(
        update(RequisitionItem)
        .where(
            RequisitionItem.id == item.id,
            RequisitionItem.returned_qty + qty <= RequisitionItem.fulfilled_qty,
        )
        .values(returned_qty=RequisitionItem.returned_qty + qty, returned_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.session.refresh(item)
    if res.rowcount != 1:
        raise CapacityExceededError(
            f"Return quantity {qty} exceeds the {item.in_use_qty} in use on item {item.id}.",
            item_id=item.id,
            requested=qty,
            limit=item.in_use_qty,
        )


def add_decision(
    req: Requisition, user_id: int, kind: DecisionKind, reason: str | None
) -> RequisitionDecision:
    dec = RequisitionDecision(
        requisition=req,
        user_id=int(user_id),
        kind=kind,
        reason=reason or None,
        decided_at=utcnow(),
    )
    db.session.add(dec)
    return dec


def archive_and_delete(req: Requisition, actor_id: int | None) -> None:
    """Snapshot the header into the recycle bin, then destroy it with its children."""
    archive_dao.archive(
        TABLE, req.id, ArchiveAction.DELETE, req.snapshot(), None, actor_id
    )
    db.session.delete(req)
    db.session.flush()
