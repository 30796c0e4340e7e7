"""
Exception hierarchy for order submission.

  OrderError
    OrderValidationError        order incomplete or subtotal not positive
    SubmissionInProgressError   submit called while one is still in flight
    SubmissionError             persistence failed (either gateway mode)
      TransportError            remote service unreachable / non-2xx / timeout
      StorageError              local storage unavailable, full or failing
"""
from typing import Optional


class OrderError(Exception):
    """Base class for all order engine errors."""


class OrderValidationError(OrderError):
    def __init__(self, errors: list) -> None:
        self.errors = list(errors)
        summary = "; ".join(e.description for e in self.errors) or "order is invalid"
        super().__init__(summary)


class SubmissionInProgressError(OrderError):
    pass


class SubmissionError(OrderError):
    """Raised when an order could not be persisted. The order itself is kept."""


class TransportError(SubmissionError):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_excerpt: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_excerpt = response_excerpt


class StorageError(SubmissionError):
    pass
