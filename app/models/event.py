import uuid
import enum
from sqlalchemy import (
    Column, String, Boolean, DateTime, func, Text, DECIMAL, Integer, ForeignKey,
    UniqueConstraint, Uuid, Enum as SAEnum,
)
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.theater import DocumentJSON

class EventStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"

class Event(Base):
    __tablename__ = "events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organizer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    location = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    image_url = Column(Text, nullable=True)
    ticket_price = Column(DECIMAL(10, 2), nullable=False, default=0)
    total_tickets = Column(Integer, nullable=False, default=0)
    remaining_tickets = Column(Integer, nullable=False, default=0)
    status = Column(SAEnum(EventStatus, native_enum=False), nullable=False, default=EventStatus.PENDING, index=True)

    # Theater seating. layout/seat_config are copied from the theater at creation
    # and evolve independently afterwards.
    theater_id = Column(Uuid(as_uuid=True), ForeignKey("theaters.id"), nullable=True, index=True)
    has_theater_seating = Column(Boolean, nullable=False, default=False)
    seat_pricing = Column(DocumentJSON, nullable=False, default=dict)  # {seat_type: "price"}
    layout = Column(DocumentJSON, nullable=True)
    seat_config = Column(DocumentJSON, nullable=False, default=list)
    total_seats = Column(Integer, nullable=False, default=0)
    vip_seats = Column(Integer, nullable=False, default=0)
    premium_seats = Column(Integer, nullable=False, default=0)

    # Optimistic concurrency token, bumped by every write to the event row
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    organizer = relationship("User")
    theater = relationship("Theater", back_populates="events")
    booked_seats = relationship(
        "EventBookedSeat", back_populates="event", cascade="all, delete-orphan",
        order_by="EventBookedSeat.id",
    )
    bookings = relationship("Booking", back_populates="event", cascade="all, delete-orphan")

class EventBookedSeat(Base):
    __tablename__ = "event_booked_seats"
    __table_args__ = (
        # A physical seat can be claimed once per event
        UniqueConstraint("event_id", "section", "row", "seat_number", name="uq_event_booked_seat"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id"), nullable=False, index=True)
    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    row = Column(String(20), nullable=False)
    seat_number = Column(Integer, nullable=False)
    section = Column(String(20), nullable=False, default="main")

    event = relationship("Event", back_populates="booked_seats")
    booking = relationship("Booking")
