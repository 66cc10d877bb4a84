from typing import Any, Dict


class RequisitionError(Exception):
    """Base class for every business rule violation raised by the engine."""

    default_code = "requisition_error"
    default_http_status = 422

    def __init__(
        self,
        message: str,
        code: str | None = None,
        http_status: int | None = None,
        **payload: Any,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.http_status = int(http_status or self.default_http_status)
        self.payload: Dict[str, Any] = {
            k: v for k, v in payload.items() if v is not None
        }
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"error": self.code, "message": self.message}
        data.update(self.payload)
        return data


class ValidationError(RequisitionError):
    default_code = "validation_error"
    default_http_status = 400


class NotFoundError(RequisitionError):
    default_code = "not_found"
    default_http_status = 404


class CapacityExceededError(RequisitionError):
    default_code = "capacity_exceeded"
    default_http_status = 409


class InsufficientStockError(RequisitionError):
    default_code = "insufficient_stock"
    default_http_status = 409


class ForbiddenError(RequisitionError):
    default_code = "forbidden"
    default_http_status = 403


class SellableMaterialError(RequisitionError):
    default_code = "sellable_material"


class ConsumableMaterialError(RequisitionError):
    default_code = "consumable_material"


class CategoryUnresolvedError(RequisitionError):
    default_code = "category_unresolved"
