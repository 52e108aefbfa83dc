
class SchedulingError(RuntimeError):
    """Base class for every error raised by the scheduling core."""
    pass


class ValidationError(SchedulingError):
    """Raised for malformed input (bad date, unknown service, bad patient data) before storage is touched."""
    pass


class InvalidTransition(ValidationError):
    """Raised when the configured policy forbids a status change."""
    pass


class SlotAlreadyBooked(SchedulingError):
    """Raised when the requested interval overlaps an appointment that already holds it."""

    def __init__(self, message: str = "This time slot was just taken. Please select another.") -> None:
        super().__init__(message)


class StorageUnavailable(SchedulingError):
    """Raised when the appointment store is unreachable or times out. Retryable."""
    pass


class NotFound(SchedulingError):
    """Raised when an appointment or service id does not exist."""
    pass
