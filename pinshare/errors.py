"""Error taxonomy shared by services and route handlers.

Services raise these; ``pinshare.main`` renders them as ``{"error", "details"?}``
with the matching status code.
"""

from typing import Any, Dict, Optional


class PinShareError(Exception):
    """Base error carrying a client-facing message and HTTP status."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(PinShareError):
    """Malformed input, rejected before any persistence or external call."""

    status_code = 400


class ConflictError(PinShareError):
    """Duplicate PIN or file name."""

    status_code = 400


class AuthError(PinShareError):
    """Missing or wrong credential."""

    status_code = 401


class InvalidTokenError(AuthError):
    """Bearer token is malformed, tampered with, or expired."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class NotFoundError(PinShareError):
    status_code = 404


class PayloadTooLargeError(PinShareError):
    status_code = 413


class DependencyError(PinShareError):
    """Database or object storage failure."""

    status_code = 500


class StorageError(DependencyError):
    """Object storage rejected or failed an operation."""
