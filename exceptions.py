# exceptions.py
"""
Error taxonomy for the lease and payment ledger.

Services raise these; the API layer maps each class to an HTTP status in
one place (see ``register_exception_handlers`` in main.py).
"""
from typing import Any, Optional


class LedgerError(Exception):
     """Base class for every error raised by the ledger services."""

     status_code = 400
     retryable = False

     def __init__(self, message: str, detail: Optional[Any] = None):
          super().__init__(message)
          self.message = message
          self.detail = detail

     def to_dict(self) -> dict:
          body = {
               "success": False,
               "error": self.__class__.__name__,
               "message": self.message,
          }
          if self.detail is not None:
               body["detail"] = self.detail
          if self.retryable:
               body["retryable"] = True
          return body


class ValidationError(LedgerError):
     """Malformed or missing input; the caller must fix the request."""

     status_code = 400


class AccessDeniedError(LedgerError):
     """The actor's scope excludes the target."""

     status_code = 403


class NotFoundError(LedgerError):
     """A referenced entity does not exist."""

     status_code = 404


class ConflictError(LedgerError):
     """The operation would violate an invariant (e.g. a second active lease)."""

     status_code = 409


class PaymentProcessingError(LedgerError):
     """Upstream payment processor failure. Safe for the caller to retry with backoff."""

     status_code = 502
     retryable = True


class ConsistencyError(LedgerError):
     """
     An invariant was found already violated in stored data.

     Fatal for the current operation. Never auto-corrected.
     """

     status_code = 500
