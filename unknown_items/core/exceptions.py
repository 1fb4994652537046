"""Service-level errors mapped to HTTP responses in ``unknown_items.main``."""
from typing import Any


class AppError(Exception):
    status_code: int = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    """Malformed or out-of-range input."""

    status_code = 400


class ForbiddenError(AppError):
    """Authenticated, but not the owner or an admin."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404
