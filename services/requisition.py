"""Requisition lifecycle: create, fulfil, return, decide, remove and list.

Every mutating call runs in one ``atomic()`` block. Item rows are re-read
under lock inside that block and the quantity bumps are guarded UPDATEs, so
two concurrent calls cannot push an item past its bounds; the loser gets a
``CapacityExceededError`` and nothing it did is committed.
"""
from datetime import date, datetime
from typing import Dict, List

from flask import current_app

from dao import archive as archive_dao
from dao import inventory as inv_dao
from dao import material as material_dao
from dao import requisition as req_dao
from dao.session import atomic
from db.models.archive import ArchiveAction
from db.models.inventory import MovementDirection
from db.models.material import Material
from db.models.requisition import (
    DecisionKind,
    Requisition,
    RequisitionItem,
    RequisitionStatus,
    ReturnCondition,
)
from errors import (
    CapacityExceededError,
    CategoryUnresolvedError,
    ConsumableMaterialError,
    NotFoundError,
    SellableMaterialError,
    ValidationError,
)
from services.status import ItemLine, header_status, item_status
from utils.auth import Actor, authorize_category, authorize_sellable

DECISION_TO_STATUS = {
    DecisionKind.APPROVE: RequisitionStatus.APPROVED,
    DecisionKind.REJECT: RequisitionStatus.REJECTED,
    DecisionKind.CANCEL: RequisitionStatus.CANCELLED,
}


# ---------- input helpers ----------
def _positive_int(value, label: str) -> int:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{label} must be a positive integer.", field=label)
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{label} must be a positive integer.", field=label)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"{label} must be a positive integer.", field=label
        ) from None
    if number <= 0:
        raise ValidationError(f"{label} must be a positive integer.", field=label)
    return number


def _to_enum(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    raw = str(value or "").strip()
    key = raw.upper().replace(" ", "_")
    if key in enum_cls.__members__:
        return enum_cls[key]
    for member in enum_cls:
        if member.value == raw:
            return member
    raise ValidationError(f"Invalid {label}: {value!r}.", field=label)


def _text(value, label: str, limit: int):
    if value is None:
        return None
    text = str(value).strip()
    if len(text) > limit:
        raise ValidationError(
            f"{label} must be at most {limit} characters.", field=label, limit=limit
        )
    return text or None


def _to_date(value):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(
            f"Invalid needed-by date: {value!r}.", field="needed_at"
        ) from None


def _normalize_lines(lines, extra_fields=()) -> List[Dict]:
    if not lines:
        raise ValidationError("At least one line is required.")
    normalized = []
    for idx, ln in enumerate(lines, 1):
        row = {
            "item_id": _positive_int(ln.get("item_id"), f"line {idx} item_id"),
            "quantity": _positive_int(ln.get("quantity"), f"line {idx} quantity"),
        }
        for name in extra_fields:
            row[name] = ln.get(name)
        normalized.append(row)
    return normalized


# ---------- aggregate helpers ----------
def _item_or_404(items: Dict[int, RequisitionItem], req: Requisition, item_id: int):
    item = items.get(item_id)
    if item is None:
        raise NotFoundError(
            f"Item {item_id} not found in requisition {req.code}.",
            item_id=item_id,
            requisition_id=req.id,
        )
    return item


def _material_or_404(item: RequisitionItem) -> Material:
    material = material_dao.get_material(item.material_id)
    if material is None:
        raise NotFoundError(
            f"Material {item.material_id} not found for item {item.id}.",
            item_id=item.id,
            material_id=item.material_id,
        )
    return material


def _refresh_item_status(item: RequisitionItem) -> None:
    item.status = item_status(item.requested_qty, item.fulfilled_qty, item.returned_qty)


def _recompute_header(req: Requisition) -> RequisitionStatus:
    lines = []
    for it in req.items:
        material = material_dao.get_material(it.material_id)
        lines.append(
            ItemLine(
                it.requested_qty,
                it.fulfilled_qty,
                it.returned_qty,
                bool(material and material.consumable),
            )
        )
    req.status = header_status(lines)
    return req.status


# ---------- operations ----------
def create_requisition(
    actor_id: int,
    items: List[Dict],
    needed_at=None,
    delivery_location: str | None = None,
    justification: str | None = None,
    notes: str | None = None,
) -> Requisition:
    if not items:
        raise ValidationError("A requisition needs at least one item.")

    prepared = []
    for idx, it in enumerate(items, 1):
        qty = _positive_int(it.get("quantity"), f"item {idx} quantity")
        material_id = it.get("material_id")
        description = _text(it.get("description"), f"item {idx} description", 255)
        if material_id is None and not description:
            raise ValidationError(
                f"Item {idx} needs a material or a description.", field="items"
            )
        if material_id is not None:
            material_id = _positive_int(material_id, f"item {idx} material_id")
        prepared.append((material_id, description, qty))

    delivery_location = _text(delivery_location, "delivery_location", 120)
    justification = _text(justification, "justification", 255)
    notes = _text(notes, "notes", 255)

    with atomic():
        for material_id, description, _ in prepared:
            if material_id is not None and material_dao.get_material(material_id) is None:
                raise NotFoundError(
                    f"Material {material_id} not found.", material_id=material_id
                )
        req = req_dao.insert_requisition(
            requester_id=actor_id,
            needed_at=_to_date(needed_at),
            delivery_location=delivery_location,
            justification=justification,
            notes=notes,
        )
        for material_id, description, qty in prepared:
            if description is None:
                description = material_dao.get_material(material_id).name
            req_dao.add_item(req, material_id, description, qty)

    current_app.logger.info(
        "requisition %s created by user %s with %d item(s)",
        req.code,
        actor_id,
        len(prepared),
    )
    return req


def fulfill(requisition_id: int, actor: Actor, lines: List[Dict]) -> Requisition:
    """Issue stock against items; all lines succeed or none do."""
    lines = _normalize_lines(lines)
    ctx = actor.scope
    allow_sellable = bool(current_app.config.get("ALLOW_SELLABLE_FULFILLMENT"))

    with atomic():
        req = req_dao.get_requisition_or_404(requisition_id, lock=True)
        items = req_dao.lock_items(req.id, [ln["item_id"] for ln in lines])

        for ln in lines:
            item = _item_or_404(items, req, ln["item_id"])
            qty = ln["quantity"]

            remaining = item.requested_qty - item.fulfilled_qty
            if qty > remaining:
                raise CapacityExceededError(
                    f"Quantity {qty} exceeds the remaining {remaining} of item {item.id}.",
                    item_id=item.id,
                    requested=qty,
                    limit=remaining,
                )

            material = _material_or_404(item)
            if material.sellable:
                if not allow_sellable:
                    raise SellableMaterialError(
                        f"Sellable material {material.name} cannot be issued "
                        f"through a requisition (item {item.id}).",
                        item_id=item.id,
                        material_id=material.id,
                    )
                authorize_sellable(ctx, item.id, material.name)
            else:
                authorize_category(
                    ctx,
                    material_dao.category_id_of(material),
                    item_id=item.id,
                    allow_editor=True,
                )

            inv_dao.append_movement(
                material,
                MovementDirection.OUT,
                qty,
                f"Fulfilment of {req.code} (item {item.id})",
                requisition_id=req.id,
            )
            material_dao.decrement_stock(material, qty)
            req_dao.bump_fulfilled(item, qty)
            _refresh_item_status(item)

        _recompute_header(req)

    current_app.logger.info(
        "requisition %s fulfilled by user %s (%d line(s)), status %s",
        req.code,
        actor.id,
        len(lines),
        req.status.value,
    )
    return req


def return_items(requisition_id: int, actor: Actor, lines: List[Dict]) -> Requisition:
    """Take issued, non-consumable material back into stock."""
    lines = _normalize_lines(lines, extra_fields=("condition", "notes"))
    for idx, ln in enumerate(lines, 1):
        ln["notes"] = _text(ln["notes"], f"line {idx} notes", 255)
    ctx = actor.scope

    with atomic():
        req = req_dao.get_requisition_or_404(requisition_id, lock=True)
        items = req_dao.lock_items(req.id, [ln["item_id"] for ln in lines])

        for ln in lines:
            item = _item_or_404(items, req, ln["item_id"])
            qty = ln["quantity"]
            condition = (
                _to_enum(ReturnCondition, ln["condition"], "return condition")
                if ln.get("condition")
                else None
            )

            material = _material_or_404(item)
            if material.sellable:
                raise SellableMaterialError(
                    f"Sellable material {material.name} cannot be returned.",
                    item_id=item.id,
                    material_id=material.id,
                )
            if material.consumable:
                raise ConsumableMaterialError(
                    f"Consumable material {material.name} does not accept returns.",
                    item_id=item.id,
                    material_id=material.id,
                )
            authorize_category(ctx, material_dao.category_id_of(material), item_id=item.id)

            in_use = item.fulfilled_qty - item.returned_qty
            if qty > in_use:
                raise CapacityExceededError(
                    f"Return quantity {qty} exceeds the {in_use} in use on item {item.id}.",
                    item_id=item.id,
                    requested=qty,
                    limit=in_use,
                )

            inv_dao.append_movement(
                material,
                MovementDirection.IN,
                qty,
                f"Return of {req.code} (item {item.id})",
                requisition_id=req.id,
            )
            material_dao.increment_stock(material, qty)
            req_dao.bump_returned(item, qty)
            if condition is not None:
                item.return_condition = condition
            if ln["notes"]:
                item.return_notes = ln["notes"]
            _refresh_item_status(item)

        _recompute_header(req)

    current_app.logger.info(
        "requisition %s: %d line(s) returned by user %s, status %s",
        req.code,
        len(lines),
        actor.id,
        req.status.value,
    )
    return req


def decide(
    requisition_id: int, actor: Actor, kind, reason: str | None = None
) -> Requisition:
    """Record an approval, rejection or cancellation and set the header status from it.

    The status written here is overwritten by the next fulfil/return call;
    callers gate those calls on it. Decisions accumulate, the header reflects
    the last one.
    """
    kind = _to_enum(DecisionKind, kind, "decision kind")
    ctx = actor.scope

    with atomic():
        req = req_dao.get_requisition_or_404(requisition_id, lock=True)

        if not ctx.has_global:
            if not req.items:
                raise ValidationError(
                    f"Requisition {req.code} has no items.", requisition_id=req.id
                )
            categories = []
            for item in req.items:
                material = material_dao.get_material(item.material_id)
                category_id = material_dao.category_id_of(material) if material else None
                if category_id is None:
                    raise CategoryUnresolvedError(
                        f"Category cannot be resolved for item {item.id}.",
                        item_id=item.id,
                        material_id=item.material_id,
                    )
                categories.append((item.id, category_id))
            for item_id, category_id in categories:
                authorize_category(ctx, category_id, item_id=item_id)

        decision = req_dao.add_decision(req, actor.id, kind, reason)
        req.status = DECISION_TO_STATUS[kind]
        req.decided_by = actor.id
        req.decided_at = decision.decided_at

    current_app.logger.info(
        "requisition %s: %s by user %s", req.code, kind.value, actor.id
    )
    return req


def remove_requisition(requisition_id: int, actor_id: int | None) -> None:
    with atomic():
        req = req_dao.get_requisition_or_404(requisition_id, lock=True)
        code = req.code
        req_dao.archive_and_delete(req, actor_id)

    current_app.logger.info(
        "requisition %s archived and deleted by user %s", code, actor_id
    )


def force_status(requisition_id: int, status, actor_id: int | None = None) -> Requisition:
    """Administrative override: writes any header status as-is.

    Skips the item-derived computation and every business check. The
    before/after snapshot goes to the recycle bin as an UPDATE entry.
    """
    status = _to_enum(RequisitionStatus, status, "status")
    with atomic():
        req = req_dao.get_requisition_or_404(requisition_id, lock=True)
        old = req.snapshot()
        req.status = status
        new = dict(old, status=status.value)
        archive_dao.archive(
            req_dao.TABLE, req.id, ArchiveAction.UPDATE, old, new, actor_id
        )

    current_app.logger.warning(
        "requisition %s status forced to %s by user %s",
        req.code,
        status.value,
        actor_id,
    )
    return req


def list_requisitions(
    actor: Actor, include_items: bool = False, include_decisions: bool = False
) -> List[Dict]:
    """Headers visible to the actor, newest first.

    Global and editor grants see everything; category grants see requisitions
    touching their categories; the sales capability adds requisitions with
    sellable items. The actor's own requisitions are always included.
    """
    ctx = actor.scope
    if ctx.sees_everything:
        ids = req_dao.all_ids()
    else:
        ids = set()
        if ctx.allowed_category_ids:
            ids |= req_dao.ids_with_materials(
                material_dao.material_ids_in_categories(ctx.allowed_category_ids)
            )
        if ctx.has_sales_capability:
            ids |= req_dao.ids_with_materials(material_dao.sellable_material_ids())
        ids |= req_dao.ids_for_requester(actor.id)

    rows = req_dao.load_many(ids, include_items, include_decisions)
    return [r.to_dict(include_items, include_decisions) for r in rows]


def get_requisition_detail(requisition_id: int) -> Dict:
    req = req_dao.get_requisition_or_404(requisition_id)
    return req.to_dict(include_items=True, include_decisions=True)
