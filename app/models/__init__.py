from app.models.user import User, UserRole
from app.models.theater import Theater, SeatType, Section, StagePosition
from app.models.event import Event, EventBookedSeat, EventStatus
from app.models.booking import Booking, BookingSeat, BookingStatus
