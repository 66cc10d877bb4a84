import enum
from datetime import date, datetime
from decimal import Decimal


def _json_safe(value):
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


class SerializerMixin:
    """Column-level dict export shared by models that end up in JSON."""

    def snapshot(self) -> dict:
        return {
            prop.columns[0].name: _json_safe(getattr(self, prop.key))
            for prop in self.__mapper__.column_attrs
        }
