from configs import db
from utils.clock import utcnow
import enum


class MovementDirection(enum.Enum):
    IN = "IN"
    OUT = "OUT"


class StockMovement(db.Model):
    """Append-only stock ledger.

    Name, type and price are copied at write time and material_id /
    requisition_id are plain columns, so an entry stays readable after the
    catalog row or the requisition is gone.
    """

    __tablename__ = "stock_movement"
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    material_id = db.Column(db.Integer, nullable=False, index=True)
    material_name = db.Column(db.String(100), nullable=False)
    type_name = db.Column(db.String(100), nullable=False, default="")
    direction = db.Column(
        db.Enum(MovementDirection, name="movementdirection"), nullable=False
    )
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    reason = db.Column(db.String(255), nullable=False, default="")
    requisition_id = db.Column(db.Integer, index=True)
    moved_at = db.Column(db.DateTime, default=utcnow, nullable=False)
