# marketplace/core/domain/exceptions.py
from typing import Any, Optional


class DomainError(Exception):
    """Base class for all domain-level exceptions."""

    code: str = "DOMAIN_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


# --- Client Errors ---

class ValidationError(DomainError):
    """Raised when a payload fails schema or business validation."""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthenticationError(DomainError):
    """Raised when the caller has no valid identity (missing user, bad admin token)."""

    code = "AUTHENTICATION_ERROR"
    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: Optional[Any] = None):
        super().__init__(message, details)


class AuthorizationError(DomainError):
    """Raised when the caller is known but not allowed to perform the action."""

    code = "AUTHORIZATION_ERROR"
    status_code = 403

    def __init__(self, message: str = "Access denied", details: Optional[Any] = None):
        super().__init__(message, details)


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str = "Resource", details: Optional[Any] = None):
        super().__init__(f"{resource} not found", details)


class ConflictError(DomainError):
    code = "CONFLICT"
    status_code = 409


class InsufficientStockError(ConflictError):
    """Raised when a requested quantity exceeds the product's available stock."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Insufficient stock for {product_id}", {"productId": product_id})


class RateLimitError(DomainError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, message: str = "Too many requests", details: Optional[Any] = None):
        super().__init__(message, details)


class InternalServerError(DomainError):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str = "Internal server error", details: Optional[Any] = None):
        super().__init__(message, details)
