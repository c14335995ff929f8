"""Ledger error taxonomy.

Every failure a ledger operation can raise carries a stable ``kind`` and a
human-readable message. The HTTP layer renders them as
``{"error": kind, "detail": message}`` with ``status_code``.
"""


class LedgerError(Exception):
    kind = "ledger_error"
    status_code = 400
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "detail": self.message}


class ValidationError(LedgerError):
    """Malformed or missing input."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(LedgerError):
    kind = "not_found"
    status_code = 404


class AuthorizationError(LedgerError):
    """The verified actor's role does not allow the operation."""

    kind = "authorization_error"
    status_code = 403


class ConflictError(LedgerError):
    """Business-rule violation: duplicate booking, delete-with-payments, mutating a closed event."""

    kind = "conflict"
    status_code = 409


class InvalidTransitionError(LedgerError):
    kind = "invalid_transition"
    status_code = 409


class StoreUnavailableError(LedgerError):
    """Transient connectivity or lock-wait timeout. Callers may retry with backoff."""

    kind = "store_unavailable"
    status_code = 503
    retryable = True


class ClassificationError(LedgerError):
    """Payment classification produced a type outside advance/partial/final."""

    kind = "classification_error"
    status_code = 500
