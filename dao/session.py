# dao/session.py
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from configs import db


def commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


@contextmanager
def atomic():
    """Run the block as one transaction: commit on success, roll back on any error."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
