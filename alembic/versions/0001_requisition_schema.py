"""requisition schema

Revision ID: 0001_requisition_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_requisition_schema"
down_revision = None
branch_labels = None
depends_on = None


def _json_type():
    return sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(80), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(120)),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_index(
        "ix_user_account_username", "user_account", ["username"], unique=True
    )

    op.create_table(
        "permission_template",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("label", sa.String(100), nullable=False),
    )
    op.create_table(
        "user_grant",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("user_account.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "template_id",
            sa.Integer(),
            sa.ForeignKey("permission_template.id"),
            nullable=False,
        ),
        sa.Column("resource_type", sa.String(50)),
        sa.Column("resource_id", sa.Integer()),
    )
    op.create_index("ix_user_grant_user_id", "user_grant", ["user_id"])

    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False),
    )
    op.create_table(
        "material_type",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "category_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=False
        ),
    )
    op.create_index("ix_material_type_category_id", "material_type", ["category_id"])

    op.create_table(
        "material",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price", sa.Numeric(10, 2)),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("min_stock", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(255)),
        sa.Column(
            "type_id", sa.Integer(), sa.ForeignKey("material_type.id"), nullable=False
        ),
        sa.Column("sellable", sa.Boolean(), nullable=False),
        sa.Column("consumable", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean()),
        sa.CheckConstraint("stock >= 0", name="ck_material_stock"),
    )
    op.create_index("ix_material_type_id", "material", ["type_id"])

    op.create_table(
        "stock_movement",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("material_id", sa.Integer(), nullable=False),
        sa.Column("material_name", sa.String(100), nullable=False),
        sa.Column("type_name", sa.String(100), nullable=False),
        sa.Column(
            "direction", sa.Enum("IN", "OUT", name="movementdirection"), nullable=False
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("reason", sa.String(255), nullable=False),
        sa.Column("requisition_id", sa.Integer()),
        sa.Column("moved_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_stock_movement_material_id", "stock_movement", ["material_id"])
    op.create_index(
        "ix_stock_movement_requisition_id", "stock_movement", ["requisition_id"]
    )

    op.create_table(
        "recycle_bin",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("table_name", sa.String(50), nullable=False),
        sa.Column("record_id", sa.Integer(), nullable=False),
        sa.Column(
            "action", sa.Enum("DELETE", "UPDATE", name="archiveaction"), nullable=False
        ),
        sa.Column("archived_at", sa.DateTime(), nullable=False),
        sa.Column("old_data", _json_type()),
        sa.Column("new_data", _json_type()),
        sa.Column("user_id", sa.Integer()),
    )

    op.create_table(
        "requisition",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(30), nullable=False, unique=True),
        sa.Column(
            "requester_id",
            sa.Integer(),
            sa.ForeignKey("user_account.id"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING",
                "APPROVED",
                "FULFILLED",
                "IN_USE",
                "PARTIAL",
                "RETURNED",
                "REJECTED",
                "CANCELLED",
                name="requisitionstatus",
            ),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime()),
        sa.Column("needed_at", sa.Date()),
        sa.Column("delivery_location", sa.String(120)),
        sa.Column("justification", sa.String(255)),
        sa.Column("notes", sa.String(255)),
        sa.Column("decided_by", sa.Integer(), sa.ForeignKey("user_account.id")),
        sa.Column("decided_at", sa.DateTime()),
    )
    op.create_index("ix_requisition_requester_id", "requisition", ["requester_id"])

    op.create_table(
        "requisition_item",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "requisition_id",
            sa.Integer(),
            sa.ForeignKey("requisition.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "material_id",
            sa.Integer(),
            sa.ForeignKey("material.id", ondelete="SET NULL"),
        ),
        sa.Column("description", sa.String(255)),
        sa.Column("requested_qty", sa.Integer(), nullable=False),
        sa.Column("fulfilled_qty", sa.Integer(), nullable=False),
        sa.Column("returned_qty", sa.Integer(), nullable=False),
        sa.Column(
            "return_condition",
            sa.Enum("GOOD", "DAMAGED", "LOST", name="returncondition"),
        ),
        sa.Column("return_notes", sa.String(255)),
        sa.Column("returned_at", sa.DateTime()),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING",
                "PARTIAL",
                "FULFILLED",
                "IN_USE",
                "RETURNED",
                name="itemstatus",
            ),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime()),
        sa.CheckConstraint("requested_qty > 0", name="ck_rqi_requested_positive"),
        sa.CheckConstraint(
            "fulfilled_qty >= 0 AND fulfilled_qty <= requested_qty",
            name="ck_rqi_fulfilled_range",
        ),
        sa.CheckConstraint(
            "returned_qty >= 0 AND returned_qty <= fulfilled_qty",
            name="ck_rqi_returned_range",
        ),
    )
    op.create_index(
        "ix_requisition_item_requisition_id", "requisition_item", ["requisition_id"]
    )
    op.create_index(
        "ix_requisition_item_material_id", "requisition_item", ["material_id"]
    )

    op.create_table(
        "requisition_decision",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "requisition_id",
            sa.Integer(),
            sa.ForeignKey("requisition.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("user_account.id"), nullable=False
        ),
        sa.Column(
            "kind",
            sa.Enum("APPROVE", "REJECT", "CANCEL", name="decisionkind"),
            nullable=False,
        ),
        sa.Column("reason", sa.String(255)),
        sa.Column("decided_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_requisition_decision_requisition_id",
        "requisition_decision",
        ["requisition_id"],
    )


def downgrade() -> None:
    op.drop_table("requisition_decision")
    op.drop_table("requisition_item")
    op.drop_table("requisition")
    op.drop_table("recycle_bin")
    op.drop_table("stock_movement")
    op.drop_table("material")
    op.drop_table("material_type")
    op.drop_table("category")
    op.drop_table("user_grant")
    op.drop_table("permission_template")
    op.drop_table("user_account")
    for name in (
        "decisionkind",
        "itemstatus",
        "returncondition",
        "requisitionstatus",
        "archiveaction",
        "movementdirection",
    ):
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
