from app.db.session import Base
from app.models.user import User
from app.models.theater import Theater
from app.models.event import Event, EventBookedSeat
from app.models.booking import Booking, BookingSeat
