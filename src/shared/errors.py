"""Error taxonomy shared by every bounded context.

Each error carries the HTTP status it maps to and a machine-readable code, so
the API layer can render any domain failure without knowing its origin.
"""

from typing import Any


class MarketplaceError(Exception):
    """Base class for all domain and application errors."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.details}


class ValidationFailed(MarketplaceError):
    """Malformed or missing input, reported per field.

    ``errors`` follows the ``{field: [messages]}`` shape used throughout.
    """

    status_code = 422
    code = "validation_failed"

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        super().__init__(message, errors=errors)
        self.errors = errors

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationFailed":
        """Translate a pydantic ``ValidationError`` into field-level detail."""
        errors: dict[str, list[str]] = {}
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
            field = ".".join(loc) or "__root__"
            errors.setdefault(field, []).append(err.get("msg", "Invalid value"))
        return cls(errors)


class Unauthenticated(MarketplaceError):
    status_code = 401
    code = "unauthenticated"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(MarketplaceError):
    status_code = 403
    code = "forbidden"


class NotFound(MarketplaceError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, identifier: Any):
        super().__init__(f"{entity} {identifier} not found", entity=entity, identifier=str(identifier))
        self.entity = entity
        self.identifier = identifier


class AlreadyExists(MarketplaceError):
    status_code = 409
    code = "already_exists"


class InsufficientInventory(MarketplaceError):
    status_code = 409
    code = "insufficient_inventory"

    def __init__(self, product_id: str, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient inventory for {product_name}. Available: {available}",
            product_id=str(product_id),
            product_name=product_name,
            available=available,
            requested=requested,
        )
        self.product_id = str(product_id)
        self.available = available
        self.requested = requested


class InvalidTransition(MarketplaceError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot transition from {current} to {requested}",
            current=current,
            requested=requested,
        )
        self.current = current
        self.requested = requested


class AlreadyTerminal(MarketplaceError):
    status_code = 409
    code = "already_terminal"

    def __init__(self, status: str):
        super().__init__(f"Order is already {status}", status=status)
        self.status = status


class NotDelivered(MarketplaceError):
    status_code = 409
    code = "not_delivered"

    def __init__(self, status: str):
        super().__init__("Can only rate delivered orders", status=status)
        self.status = status


class AlreadyRated(MarketplaceError):
    status_code = 409
    code = "already_rated"

    def __init__(self):
        super().__init__("Order has already been rated")


class ConcurrencyConflict(MarketplaceError):
    """Concurrent writers kept colliding; the caller may retry."""

    status_code = 503
    code = "concurrency_conflict"

    def __init__(self, message: str = "Concurrent update conflict, please retry"):
        super().__init__(message, retryable=True)
