from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base class for domain/service errors."""

    status_code = 400
    code = "bad_request"

    def __init__(self, code: Optional[str] = None, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(code or self.code)
        if code:
            self.code = code
        self.extra = extra or {}


class NotFoundError(DomainError):
    status_code = 404
    code = "not_found"


class UnauthorizedError(DomainError):
    status_code = 401
    code = "unauthorized"


class ForbiddenError(DomainError):
    status_code = 403
    code = "forbidden"


class ConflictError(DomainError):
    status_code = 409
    code = "conflict"


class ValidationError(DomainError):
    status_code = 400
    code = "invalid_request"


class EmptyCartError(DomainError):
    code = "cart_empty"


class NoItemsToOrderError(DomainError):
    code = "no_items_to_order"

    def __init__(self, skipped: List[Any]) -> None:
        super().__init__()
        self.skipped = skipped


class PersistenceError(DomainError):
    """Unexpected database failure. The detail is logged, never returned."""

    status_code = 500
    code = "server_error"
