from configs import db


class Material(db.Model):
    __tablename__ = "material"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), default=0)
    stock = db.Column(db.Integer, default=0, nullable=False)
    min_stock = db.Column(db.Integer, default=3, nullable=False)
    location = db.Column(db.String(255))

    type_id = db.Column(
        db.Integer, db.ForeignKey("material_type.id"), nullable=False, index=True
    )
    type = db.relationship("MaterialType", backref="materials")

    sellable = db.Column(db.Boolean, default=False, nullable=False)
    consumable = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    __table_args__ = (db.CheckConstraint("stock >= 0", name="ck_material_stock"),)
