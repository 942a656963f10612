import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, func, DECIMAL, Integer, ForeignKey, Uuid, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.db.session import Base

class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_number = Column(String(20), unique=True, nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id"), nullable=False, index=True)
    number_of_tickets = Column(Integer, nullable=False)
    total_price = Column(DECIMAL(10, 2), nullable=False)
    status = Column(SAEnum(BookingStatus, native_enum=False), nullable=False, default=BookingStatus.CONFIRMED, index=True)
    has_theater_seating = Column(Boolean, nullable=False, default=False)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User")
    event = relationship("Event", back_populates="bookings")
    selected_seats = relationship(
        "BookingSeat", back_populates="booking", cascade="all, delete-orphan",
        order_by="BookingSeat.position",
    )

class BookingSeat(Base):
    """Seat purchased by a booking, with the price snapshotted at booking time."""
    __tablename__ = "booking_seats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    row = Column(String(20), nullable=False)
    seat_number = Column(Integer, nullable=False)
    section = Column(String(20), nullable=False, default="main")
    seat_type = Column(String(20), nullable=False, default="standard")
    price = Column(DECIMAL(10, 2), nullable=False)

    booking = relationship("Booking", back_populates="selected_seats")
