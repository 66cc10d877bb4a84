# db/models/user.py
from configs import db
from flask_login import UserMixin


class PermissionTemplate(db.Model):
    __tablename__ = "permission_template"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    code = db.Column(db.String(50), unique=True, nullable=False)
    label = db.Column(db.String(100), nullable=False)


class User(db.Model, UserMixin):
    __tablename__ = "user_account"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(120))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    grants = db.relationship(
        "UserGrant",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def get_id(self):
        return str(self.id)


class UserGrant(db.Model):
    __tablename__ = "user_grant"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    template_id = db.Column(
        db.Integer, db.ForeignKey("permission_template.id"), nullable=False
    )
    # resource_type="category" + resource_id scopes the grant; both null = global
    resource_type = db.Column(db.String(50))
    resource_id = db.Column(db.Integer)

    user = db.relationship("User", back_populates="grants")
    template = db.relationship("PermissionTemplate", lazy="joined")
