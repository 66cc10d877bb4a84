# dao/material.py
from typing import Iterable, List, Optional

from sqlalchemy import update
from configs import db
from db.models.category import MaterialType
from db.models.material import Material
from errors import InsufficientStockError


def get_material(material_id: int | None) -> Optional[Material]:
    if material_id is None:
        return None
    return db.session.get(Material, int(material_id))


def get_type(type_id: int | None) -> Optional[MaterialType]:
    if type_id is None:
        return None
    return db.session.get(MaterialType, int(type_id))


def category_id_of(material: Material) -> Optional[int]:
    """material -> type -> category; None when the chain is broken."""
    t = get_type(material.type_id)
    return int(t.category_id) if t and t.category_id else None


def type_name_of(material: Material) -> str:
    t = get_type(material.type_id)
    return t.name if t else ""


def decrement_stock(material: Material, qty: int) -> None:
    """Guarded decrement: the row only changes while stock covers qty."""
    res = db.session.execute(
        update(Material)
        .where(Material.id == material.id, Material.stock >= qty)
        .values(stock=Material.stock - qty)
        .execution_options(synchronize_session=False)
    )
    db.session.refresh(material)
    if res.rowcount != 1:
        raise InsufficientStockError(
            f"Insufficient stock for material {material.name}.",
            material_id=material.id,
            stock=material.stock,
            requested=qty,
        )


def increment_stock(material: Material, qty: int) -> None:
    db.session.execute(
        update(Material)
        .where(Material.id == material.id)
        .values(stock=Material.stock + qty)
        .execution_options(synchronize_session=False)
    )
    db.session.refresh(material)


def sellable_material_ids() -> List[int]:
    return [
        mid
        for (mid,) in db.session.query(Material.id)
        .filter(Material.sellable.is_(True))
        .all()
    ]


def material_ids_in_categories(category_ids: Iterable[int]) -> List[int]:
    category_ids = list(set(int(x) for x in category_ids if x is not None))
    if not category_ids:
        return []
    return [
        mid
        for (mid,) in db.session.query(Material.id)
        .join(MaterialType, MaterialType.id == Material.type_id)
        .filter(MaterialType.category_id.in_(category_ids))
        .all()
    ]
