"""Exception hierarchy for Tablebook.

Every failure a caller can see is one of these classes. Each carries the HTTP
status and the ``error`` code used in the response envelope.
"""


class TablebookError(Exception):
    """Base exception."""

    status = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(TablebookError):
    """Malformed or out-of-range input."""

    status = 400
    code = "VALIDATION_ERROR"

    def __init__(self, reasons, details=None):
        if isinstance(reasons, str):
            reasons = [reasons]
        self.reasons = list(reasons)
        super().__init__(", ".join(self.reasons), details)


class AfterClosingError(ValidationError):
    """Reservation would end after the restaurant closes."""

    code = "AFTER_CLOSING"


class OutsideOpeningHoursError(ValidationError):
    """Reservation starts while the restaurant is closed."""

    code = "OUTSIDE_OPENING_HOURS"


class NotFoundError(TablebookError):
    """Unknown restaurant, client or table."""

    status = 404
    code = "NOT_FOUND"


class NoAvailabilityError(TablebookError):
    """No table can hold the party for the requested window."""

    status = 400
    code = "NO_AVAILABILITY"


class ConflictError(TablebookError):
    """The storage constraint rejected the insert after a race."""

    status = 409
    code = "TABLE_NO_LONGER_AVAILABLE"


class DuplicateClientError(TablebookError):
    """A client with the same phone already exists."""

    status = 409
    code = "DUPLICATE_CLIENT"


class InternalError(TablebookError):
    """Unexpected storage or infrastructure failure."""
