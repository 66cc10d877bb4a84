from .user import User, PermissionTemplate, UserGrant
from .category import Category, MaterialType
from .material import Material

from .inventory import StockMovement, MovementDirection
from .archive import RecycleBin, ArchiveAction
from .requisition import (
    Requisition,
    RequisitionItem,
    RequisitionDecision,
    RequisitionStatus,
    ItemStatus,
    DecisionKind,
    ReturnCondition,
)

__all__ = [n for n in dir() if n[:1].isupper()]
