"""Domain errors raised by the billing engine.

Two families reach callers: ``ValidationError`` for bad input and
``StateError`` for requests that conflict with the current state of an
invoice, batch or customer account.
"""


class BillingError(Exception):
    """Base class for every error raised by the billing engine."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BillingError):
    """Invalid or missing input: the caller can fix the request and retry."""


class NotFoundError(ValidationError):
    """A referenced customer, invoice, batch or receipt does not exist."""


class StateError(BillingError):
    """The operation is not allowed in the current business state."""
