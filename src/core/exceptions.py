"""
Application errors.

Each error carries the HTTP status it maps to; the API layer turns them
into JSON responses. UpstreamError never reaches a client: the assistant
absorbs it into the local responder.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors with a client-facing message"""

    status_code: int = 500

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {"message": self.message}
        if self.errors:
            content["errors"] = self.errors
        return content


class ValidationError(AppError):
    """Malformed or out-of-range input"""

    status_code = 400

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls("Validation failed", errors=[{"field": field, "message": message}])


class AuthError(AppError):
    """Missing, malformed or expired session token"""

    status_code = 401


class ForbiddenError(AppError):
    """Authenticated, but not allowed to touch this resource"""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Duplicate registration / completion / review"""

    status_code = 400


class StorageError(AppError):
    """Underlying data store failure"""

    status_code = 500


class UpstreamError(Exception):
    """External assistant call failed (recovered locally)"""
