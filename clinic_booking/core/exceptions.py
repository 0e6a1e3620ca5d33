"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class BookingDateOutOfRangeException(BadRequestException):
    """Requested date is in the past or beyond the booking horizon."""

    def __init__(self, message: str = "Date is outside the booking window"):
        super().__init__(message)


class InvalidSlotException(BadRequestException):
    """Requested time is not an offerable slot for the date."""

    def __init__(self, message: str = "Time slot is not offered on this date"):
        super().__init__(message)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class SlotTakenException(ConflictException):
    """A Pending appointment already holds the slot."""

    def __init__(self, message: str = "Time slot is already booked"):
        super().__init__(message)


class InvalidStatusTransitionException(ConflictException):
    """Status change not allowed when transitions are enforced."""

    def __init__(self, message: str = "Status transition not allowed"):
        super().__init__(message)


class ValidationException(AppException):
    """Validation error exception."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 422 status code."""
        super().__init__(message, status_code=422)


class StorageError(AppException):
    """Backing store read or write failed."""

    def __init__(self, message: str = "Appointment storage is unavailable"):
        """Initialize with 503 status code."""
        super().__init__(message, status_code=503)
