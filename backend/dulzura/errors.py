# Overview: Error taxonomy shared by services and routes.

"""
Application errors.

Each error carries the HTTP status the API answers with. Services raise these
(or translate driver errors into them); the handlers registered in
create_app() turn them into {"success": false, "message": ...} bodies.
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationError(AppError, ValueError):
    """400-level input problem."""
    status_code = 400


class AuthenticationError(AppError):
    """Missing credentials (401), or a token that is invalid or lacks rights (403)."""
    status_code = 401


class NotFoundError(AppError):
    """404: the entity does not exist."""
    status_code = 404


class ConflictError(AppError, ValueError):
    """409-level business rule conflict (e.g., duplicate SKU)."""
    status_code = 409


class InternalError(AppError):
    """A driver or storage failure the caller cannot fix."""
    status_code = 500
