"""Domain error codes for theater layouts and seat booking.

Every error is a local, user-visible condition. The API layer renders them
with the shared ``ErrorResponse`` envelope using ``status_code``.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_LAYOUT = "INVALID_LAYOUT"
    SEAT_NOT_FOUND = "SEAT_NOT_FOUND"
    SEAT_ALREADY_BOOKED = "SEAT_ALREADY_BOOKED"
    DUPLICATE_SEAT_REQUEST = "DUPLICATE_SEAT_REQUEST"
    SOLD_OUT = "SOLD_OUT"
    INVALID_BOOKING_REQUEST = "INVALID_BOOKING_REQUEST"
    NOT_SEATED_EVENT = "NOT_SEATED_EVENT"
    ALLOCATION_CONFLICT = "ALLOCATION_CONFLICT"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    THEATER_NOT_FOUND = "THEATER_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"


class DomainError(Exception):
    """Base domain error with code, user-safe message and optional details."""

    status_code = 400

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidLayoutError(DomainError):
    """Raised when theater geometry is out of range."""

    status_code = 422

    def __init__(self, problems: list[str]) -> None:
        super().__init__(
            code=ErrorCode.INVALID_LAYOUT,
            message="Invalid theater layout: " + "; ".join(problems),
            details={"problems": problems},
        )
        self.problems = problems


class SeatNotFoundError(DomainError):
    """Raised when a requested seat is not a bookable seat of the event."""

    def __init__(self, seat_key: str, section: str) -> None:
        super().__init__(
            code=ErrorCode.SEAT_NOT_FOUND,
            message=f"Seat {seat_key} ({section}) is not available for booking",
            details={"seat_key": seat_key, "section": section},
        )
        self.seat_key = seat_key
        self.section = section


class SeatAlreadyBookedError(DomainError):
    """Raised when a requested seat is already claimed by another booking."""

    status_code = 409

    def __init__(self, seat_key: str, section: str) -> None:
        super().__init__(
            code=ErrorCode.SEAT_ALREADY_BOOKED,
            message=f"Seat {seat_key} ({section}) is already booked",
            details={"seat_key": seat_key, "section": section},
        )
        self.seat_key = seat_key
        self.section = section


class DuplicateSeatRequestError(DomainError):
    """Raised when the same seat appears twice in one request."""

    def __init__(self, seat_key: str, section: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_SEAT_REQUEST,
            message=f"Seat {seat_key} ({section}) was requested more than once",
            details={"seat_key": seat_key, "section": section},
        )
        self.seat_key = seat_key
        self.section = section


class SoldOutError(DomainError):
    """Raised when the event cannot cover the requested ticket count."""

    status_code = 409

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            code=ErrorCode.SOLD_OUT,
            message=f"Only {available} ticket(s) available, requested {requested}",
            details={"requested": requested, "available": available},
        )
        self.requested = requested
        self.available = available


class InvalidBookingRequestError(DomainError):
    """Raised for malformed booking requests (no seats, bad quantity)."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_BOOKING_REQUEST, message=message)


class NotSeatedEventError(DomainError):
    """Raised when seat-level operations target an event without seating."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_SEATED_EVENT,
            message="This event does not have theater seating",
        )
        self.event_id = event_id


class AllocationConflictError(DomainError):
    """Raised when concurrent writes kept invalidating the allocation."""

    status_code = 409

    def __init__(self, event_id: str, attempts: int) -> None:
        super().__init__(
            code=ErrorCode.ALLOCATION_CONFLICT,
            message="The event changed while booking, please retry",
            details={"attempts": attempts},
        )
        self.event_id = event_id


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    status_code = 404

    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.event_id = event_id


class TheaterNotFoundError(DomainError):
    """Raised when a theater is not found or inactive."""

    status_code = 404

    def __init__(self, theater_id: str) -> None:
        super().__init__(code=ErrorCode.THEATER_NOT_FOUND, message="Theater not found")
        self.theater_id = theater_id


class BookingNotFoundError(DomainError):
    """Raised when a booking is not found."""

    status_code = 404

    def __init__(self, booking_id: str) -> None:
        super().__init__(code=ErrorCode.BOOKING_NOT_FOUND, message="Booking not found")
        self.booking_id = booking_id
