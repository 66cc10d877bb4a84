from configs import db
from sqlalchemy.dialects.postgresql import JSONB
from utils.clock import utcnow
import enum

JSONType = db.JSON().with_variant(JSONB(), "postgresql")


class ArchiveAction(enum.Enum):
    DELETE = "DELETE"
    UPDATE = "UPDATE"


class RecycleBin(db.Model):
    __tablename__ = "recycle_bin"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    table_name = db.Column(db.String(50), nullable=False)
    record_id = db.Column(db.Integer, nullable=False)
    action = db.Column(db.Enum(ArchiveAction, name="archiveaction"), nullable=False)
    archived_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    old_data = db.Column(JSONType)
    new_data = db.Column(JSONType)
    user_id = db.Column(db.Integer)
