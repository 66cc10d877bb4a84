from configs import db
from db.models.base import SerializerMixin
from utils.clock import utcnow
import enum


class RequisitionStatus(enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    FULFILLED = "FULFILLED"
    IN_USE = "IN_USE"
    PARTIAL = "PARTIAL"
    RETURNED = "RETURNED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class ItemStatus(enum.Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    FULFILLED = "FULFILLED"
    IN_USE = "IN_USE"
    RETURNED = "RETURNED"


class DecisionKind(enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"


class ReturnCondition(enum.Enum):
    GOOD = "GOOD"
    DAMAGED = "DAMAGED"
    LOST = "LOST"


class Requisition(SerializerMixin, db.Model):
    __tablename__ = "requisition"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    code = db.Column(db.String(30), unique=True, nullable=False)
    requester_id = db.Column(
        db.Integer, db.ForeignKey("user_account.id"), nullable=False, index=True
    )
    status = db.Column(
        db.Enum(RequisitionStatus, name="requisitionstatus"),
        default=RequisitionStatus.PENDING,
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    needed_at = db.Column(db.Date)
    delivery_location = db.Column(db.String(120))
    justification = db.Column(db.String(255))
    notes = db.Column(db.String(255))
    # set by the last decision only
    decided_by = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    decided_at = db.Column(db.DateTime)

    requester = db.relationship("User", foreign_keys=[requester_id])
    items = db.relationship(
        "RequisitionItem",
        back_populates="requisition",
        cascade="all, delete-orphan",
        order_by="RequisitionItem.id",
    )
    decisions = db.relationship(
        "RequisitionDecision",
        back_populates="requisition",
        cascade="all, delete-orphan",
        order_by=lambda: [RequisitionDecision.decided_at, RequisitionDecision.id],
    )

    def to_dict(self, include_items=False, include_decisions=False) -> dict:
        data = self.snapshot()
        data["requester_name"] = (
            self.requester.full_name or self.requester.username
            if self.requester
            else None
        )
        if include_items:
            data["items"] = [it.to_dict() for it in self.items]
        if include_decisions:
            data["decisions"] = [d.to_dict() for d in self.decisions]
        return data


class RequisitionItem(SerializerMixin, db.Model):
    __tablename__ = "requisition_item"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    requisition_id = db.Column(
        db.Integer,
        db.ForeignKey("requisition.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # survives catalog deletion as a description-only history row
    material_id = db.Column(
        db.Integer, db.ForeignKey("material.id", ondelete="SET NULL"), index=True
    )
    description = db.Column(db.String(255))
    requested_qty = db.Column(db.Integer, nullable=False)
    fulfilled_qty = db.Column(db.Integer, default=0, nullable=False)
    returned_qty = db.Column(db.Integer, default=0, nullable=False)
    return_condition = db.Column(
        db.Enum(ReturnCondition, name="returncondition"), nullable=True
    )
    return_notes = db.Column(db.String(255))
    returned_at = db.Column(db.DateTime)
    status = db.Column(
        db.Enum(ItemStatus, name="itemstatus"),
        default=ItemStatus.PENDING,
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    requisition = db.relationship("Requisition", back_populates="items")
    material = db.relationship("Material")

    __table_args__ = (
        db.CheckConstraint("requested_qty > 0", name="ck_rqi_requested_positive"),
        db.CheckConstraint(
            "fulfilled_qty >= 0 AND fulfilled_qty <= requested_qty",
            name="ck_rqi_fulfilled_range",
        ),
        db.CheckConstraint(
            "returned_qty >= 0 AND returned_qty <= fulfilled_qty",
            name="ck_rqi_returned_range",
        ),
    )

    @property
    def remaining_qty(self) -> int:
        return self.requested_qty - self.fulfilled_qty

    @property
    def in_use_qty(self) -> int:
        return self.fulfilled_qty - self.returned_qty

    def to_dict(self) -> dict:
        return self.snapshot()


class RequisitionDecision(SerializerMixin, db.Model):
    __tablename__ = "requisition_decision"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    requisition_id = db.Column(
        db.Integer,
        db.ForeignKey("requisition.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = db.Column(db.Integer, db.ForeignKey("user_account.id"), nullable=False)
    kind = db.Column(db.Enum(DecisionKind, name="decisionkind"), nullable=False)
    reason = db.Column(db.String(255))
    decided_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    requisition = db.relationship("Requisition", back_populates="decisions")

    def to_dict(self) -> dict:
        return self.snapshot()
