"""
Error taxonomy - every failure the auth layer can surface.

Each error carries the HTTP status it maps to so the API boundary can
render it without a lookup table. Nothing in this package retries; these
are terminal for the current request.
"""

from typing import List, Optional


class MarketAuthError(Exception):
    """Base class for all errors raised by market_auth."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serialize to the error response body."""
        return {"success": False, "message": self.message}


class ValidationError(MarketAuthError):
    """Malformed or missing input. Carries every violated rule."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or self.default_message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class ConflictError(MarketAuthError):
    """Email already registered in one of the identity collections."""

    status_code = 400
    default_message = "Email already registered. Please use a different email address"


class AuthError(MarketAuthError):
    """Bad credentials or deactivated account."""

    status_code = 401
    default_message = "Invalid email or password"


class UnauthenticatedError(AuthError):
    """
    Session verification failed.

    The message is always the same regardless of which check failed
    (missing header, bad signature, expired, revoked, principal gone).
    """

    default_message = "Not authorized to access this route"

    def __init__(self, reason: str = "unauthenticated"):
        self.reason = reason
        super().__init__(self.default_message)


class PendingApprovalError(AuthError):
    """Seller/deliverer credentials are valid but the account is not approved."""

    status_code = 403
    default_message = "Your account is pending admin approval. Please wait for approval"


class ForbiddenError(MarketAuthError):
    """Authenticated but not permitted (role, approval, ownership)."""

    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFoundError(MarketAuthError):
    status_code = 404
    default_message = "Resource not found"


class StoreUnavailable(MarketAuthError):
    """A store call timed out or its backend is unreachable. Safe to retry."""

    status_code = 503
    default_message = "Store temporarily unavailable"
