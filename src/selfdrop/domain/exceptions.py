"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Errors that affect money or inventory (``InsufficientStockError``,
``InvalidTransitionError``, ``PaymentDeclinedError``) abort the operation
that raised them.  ``EstimationUnavailableError`` and
``DispatchFailureError`` are recovered where they occur and never reach the
checkout flow.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(ValidationError):
    """A product does not have enough stock to cover a reservation."""

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(need {requested}, have {available} available)"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidTransitionError(DomainException):
    """The requested status is not reachable, or the actor may not request it."""


class PaymentDeclinedError(DomainException):
    """The payment processor refused to authorize the order amount."""


class EstimationUnavailableError(DomainException):
    """The delivery-cost provider could not produce a quote."""


class DispatchFailureError(DomainException):
    """A notification could not be delivered to a subscriber."""
