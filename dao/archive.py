# dao/archive.py
from configs import db
from db.models.archive import ArchiveAction, RecycleBin


def archive(
    table: str,
    record_id: int,
    action: ArchiveAction,
    old: dict | None,
    new: dict | None,
    user_id: int | None,
) -> RecycleBin:
    entry = RecycleBin(
        table_name=table,
        record_id=int(record_id),
        action=action,
        old_data=old,
        new_data=new,
        user_id=user_id,
    )
    db.session.add(entry)
    return entry


def entries_for(table: str, record_id: int):
    return (
        RecycleBin.query.filter_by(table_name=table, record_id=int(record_id))
        .order_by(RecycleBin.id.asc())
        .all()
    )
