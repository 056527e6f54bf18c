"""Error kinds surfaced by service operations.

Every collaborator failure is converted to one of these before it leaves a
service, and ``main.py`` renders them as ``{"error": ..., "details": ...}``.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Malformed or missing input. Raised before the store is contacted."""

    status_code = 400


class AuthorizationError(AppError):
    status_code = 403


class AuthenticationRequired(AuthorizationError):
    status_code = 401


class NotFoundError(AppError):
    """The entity does not exist or is not visible to the caller."""

    status_code = 404


class StorageError(AppError):
    status_code = 500
