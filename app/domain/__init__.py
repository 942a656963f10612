from app.domain.errors import (
    DomainError,
    ErrorCode,
    InvalidLayoutError,
    SeatNotFoundError,
    SeatAlreadyBookedError,
    DuplicateSeatRequestError,
    SoldOutError,
    InvalidBookingRequestError,
    NotSeatedEventError,
    AllocationConflictError,
    EventNotFoundError,
    TheaterNotFoundError,
    BookingNotFoundError,
)
from app.domain.models import (
    Allocation,
    BookedSeat,
    BookingState,
    Capacity,
    EventState,
    NewBooking,
    Seat,
    SeatRef,
    SelectedSeat,
    seat_key,
)
