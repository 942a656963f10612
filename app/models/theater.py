import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, func, Text, Integer, ForeignKey, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.db.session import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
DocumentJSON = JSON().with_variant(JSONB(), "postgresql")

class SeatType(str, enum.Enum):
    STANDARD = "standard"
    VIP = "vip"
    PREMIUM = "premium"
    WHEELCHAIR = "wheelchair"
    DISABLED = "disabled"

class Section(str, enum.Enum):
    MAIN = "main"
    BALCONY = "balcony"

class StagePosition(str, enum.Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

class Theater(Base):
    __tablename__ = "theaters"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    layout = Column(DocumentJSON, nullable=False)            # TheaterLayout document
    seat_config = Column(DocumentJSON, nullable=False, default=list)  # list of SeatConfig documents

    # Derived from layout + seat_config on every write, see app.utils.capacity
    total_seats = Column(Integer, nullable=False, default=0)
    vip_seats = Column(Integer, nullable=False, default=0)
    premium_seats = Column(Integer, nullable=False, default=0)

    image_url = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    # Relationships
    creator = relationship("User")
    events = relationship("Event", back_populates="theater")
