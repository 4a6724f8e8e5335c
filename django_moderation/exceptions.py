class ModerationError(Exception):
    """
    Base exception for all django-moderation errors.

    Every error carries a stable machine-readable ``error`` label, a human
    ``message`` and the HTTP status the API layer answers with.
    """
    status_code = 500
    default_error = 'moderation_error'
    default_message = 'Moderation request failed.'

    def __init__(self, message=None, error=None):
        self.message = message or self.default_message
        self.error = error or self.default_error
        super().__init__(self.message)

    def as_dict(self):
        return {'error': self.error, 'message': self.message}


class ValidationFailed(ModerationError):
    """
    Raised when request input is rejected before any store access
    (bad action, bad bulk size, missing field, malformed cursor).
    """
    status_code = 400
    default_error = 'invalid_input'
    default_message = 'Invalid input.'


class NotFound(ModerationError):
    """
    Raised when a content or report ID does not resolve.
    """
    status_code = 404
    default_error = 'not_found'
    default_message = 'The requested item does not exist.'


class Conflict(ModerationError):
    """
    Raised when the stored state changed between read and write, or a
    transition is not allowed from the current state.
    """
    status_code = 409
    default_error = 'conflict'
    default_message = 'The item was modified concurrently. Reload and try again.'


class StoreError(ModerationError):
    """
    Raised when the database fails during a moderation operation.
    """
    status_code = 500
    default_error = 'internal_error'
    default_message = 'The moderation store failed to complete the request.'


class StoreTimeout(StoreError):
    """
    Raised when a store operation exceeds the configured timeout.
    """
    status_code = 504
    default_error = 'timeout'
    default_message = 'The moderation store did not respond in time.'


class AuditTrailImmutable(ModerationError):
    """
    Raised when code attempts to modify or delete an audit record.
    """
    default_error = 'audit_immutable'
    default_message = 'Audit records cannot be modified or deleted.'
