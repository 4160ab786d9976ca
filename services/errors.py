"""
Error taxonomy for store and identity operations.

Each error carries the HTTP status the routes answer with, so every caller maps
failures the same way.
"""


class StoreError(Exception):
    """Base class for failures surfaced to the caller."""
    status_code = 500
    default_message = "The operation could not be completed"

    def __init__(self, message=None, detail=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.detail = detail

    def to_dict(self):
        data = {'success': False, 'message': self.message, 'error': type(self).__name__}
        if self.detail:
            data['detail'] = self.detail
        return data


class PermissionDenied(StoreError):
    """A policy rule refused the action."""
    status_code = 403
    default_message = "Permission denied"


class ValidationFailed(StoreError):
    """Required field missing or malformed."""
    status_code = 400
    default_message = "Invalid input"


class NotFound(StoreError):
    status_code = 404
    default_message = "Not found"


class IntegrityViolation(StoreError):
    """A database constraint refused the write, e.g. deleting a sector that still has tasks."""
    status_code = 409
    default_message = "The change conflicts with existing data"


class ImmutableRecordError(IntegrityViolation):
    """Attempt to modify an append-only record."""
    default_message = "This record is append-only"


class StoreUnavailable(StoreError):
    """Infrastructure failure talking to the database."""
    status_code = 503
    default_message = "The data store is unavailable, please try again"


class AuthError(StoreError):
    """Identity-store failure: bad credentials, duplicate account, invalid session."""
    status_code = 401
    default_message = "Authentication failed"

    def __init__(self, message=None, detail=None, status_code=None):
        super().__init__(message, detail)
        if status_code is not None:
            self.status_code = status_code
