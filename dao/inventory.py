# dao/inventory.py
from collections import defaultdict
from typing import Dict, List

from configs import db
from dao import material as material_dao
from db.models.inventory import MovementDirection, StockMovement
from db.models.material import Material


def append_movement(
    material: Material,
    direction: MovementDirection,
    quantity: int,
    reason: str,
    requisition_id: int | None = None,
) -> StockMovement:
    """
    Record one movement. Name/type/price are snapshotted from the catalog row;
    stock itself is changed separately by dao.material.
    """
    mv = StockMovement(
        material_id=material.id,
        material_name=material.name,
        type_name=material_dao.type_name_of(material),
        direction=direction,
        quantity=int(quantity),
        unit_price=material.price or 0,
        reason=reason,
        requisition_id=requisition_id,
    )
    db.session.add(mv)
    return mv


def movements_for_requisition(requisition_id: int) -> List[StockMovement]:
    return (
        StockMovement.query.filter_by(requisition_id=requisition_id)
        .order_by(StockMovement.id.asc())
        .all()
    )


def net_out_by_material(requisition_id: int) -> Dict[int, int]:
    """Sum(OUT) - Sum(IN) per material for one requisition."""
    totals: Dict[int, int] = defaultdict(int)
    for mv in movements_for_requisition(requisition_id):
        sign = 1 if mv.direction == MovementDirection.OUT else -1
        totals[mv.material_id] += sign * int(mv.quantity)
    return dict(totals)
