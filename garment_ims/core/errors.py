"""Garment IMS — Domain errors raised by the reconciliation engine and its collaborators."""


class EngineError(Exception):
    """Base class for errors surfaced to invoice-save callers."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(EngineError):
    """Bad input detected before any mutation. Recoverable: fix the input and resubmit."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_detail(self) -> dict:
        return {"field": self.field, "message": self.message}


class ConflictError(EngineError):
    """Stock state does not allow the requested change. Aborts the invoice save."""


class PersistenceError(EngineError):
    """Underlying storage call failed. Aborts the invoice save."""
