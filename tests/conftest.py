"""
Test configuration and fixtures.

- In-memory SQLite database shared by the test session and request sessions
- Users of each role and bearer-token headers
- Theater / event factories
- An in-memory EventStore for allocator tests (no database)
"""

# Environment must be set before app modules read settings at import time
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

import dataclasses  # noqa: E402
import threading  # noqa: E402
import uuid  # noqa: E402
from datetime import datetime  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.security import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.domain.models import BookedSeat, BookingState, EventState  # noqa: E402
from app.main import app  # noqa: E402
from app.models.booking import BookingStatus  # noqa: E402
from app.models.event import Event, EventStatus  # noqa: E402
from app.models.theater import SeatType, Theater  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402
from app.schemas.layout import FloorInfo, SeatConfig, TheaterLayout  # noqa: E402
from app.stores.interfaces import EventStore  # noqa: E402
from app.utils.capacity import apply_capacity  # noqa: E402
from app.utils.documents import dump_layout, dump_pricing, dump_seat_config  # noqa: E402
from app.utils.layout import merge_seat_config, with_default_row_labels  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PRICING = {SeatType.STANDARD: Decimal("50"), SeatType.VIP: Decimal("100")}


# =============================================================================
# Database / client
# =============================================================================


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# =============================================================================
# Users
# =============================================================================


def _create_user(db, role: UserRole, email: str, full_name: str) -> User:
    user = User(email=email, full_name=full_name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def organizer(db):
    return _create_user(db, UserRole.ORGANIZER, "organizer@example.com", "Olive Organizer")


@pytest.fixture
def other_organizer(db):
    return _create_user(db, UserRole.ORGANIZER, "other.organizer@example.com", "Oscar Organizer")


@pytest.fixture
def admin(db):
    return _create_user(db, UserRole.ADMIN, "admin@example.com", "Ada Admin")


@pytest.fixture
def customer(db):
    return _create_user(db, UserRole.STANDARD, "customer@example.com", "Cam Customer")


@pytest.fixture
def other_customer(db):
    return _create_user(db, UserRole.STANDARD, "other.customer@example.com", "Cory Customer")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


@pytest.fixture
def headers():
    return auth_headers


# =============================================================================
# Theaters / events
# =============================================================================


def build_layout(rows: int = 5, seats_per_row: int = 10, **kwargs) -> TheaterLayout:
    return with_default_row_labels(
        TheaterLayout(main_floor=FloorInfo(rows=rows, seats_per_row=seats_per_row), **kwargs)
    )


@pytest.fixture
def make_theater(db, organizer):
    """Insert a theater directly (bypassing the API)."""

    def _make(rows=5, seats_per_row=10, seat_config=(), created_by=None, **layout_kwargs) -> Theater:
        layout = build_layout(rows, seats_per_row, **layout_kwargs)
        config = merge_seat_config([], seat_config)
        theater = Theater(
            name="Grand Hall",
            description="Test theater",
            created_by=created_by or organizer.id,
            layout=dump_layout(layout),
            seat_config=dump_seat_config(config),
        )
        apply_capacity(theater, layout, config)
        db.add(theater)
        db.commit()
        db.refresh(theater)
        return theater

    return _make


@pytest.fixture
def make_event(db, organizer):
    """Insert an approved event directly, seated when a theater is given."""

    def _make(theater=None, ticket_price="25", total_tickets=None, pricing=None) -> Event:
        event = Event(
            organizer_id=organizer.id,
            title="Opening Night",
            description="Test event",
            date=datetime(2030, 1, 1, 19, 0),
            location="Main Street 1",
            category="concert",
            ticket_price=Decimal(ticket_price),
            status=EventStatus.APPROVED,
            has_theater_seating=theater is not None,
            seat_pricing=dump_pricing(DEFAULT_PRICING if pricing is None else pricing),
            seat_config=[],
        )
        if theater is not None:
            event.theater_id = theater.id
            event.layout = dict(theater.layout)
            event.seat_config = list(theater.seat_config)
            event.total_seats = theater.total_seats
            event.vip_seats = theater.vip_seats
            event.premium_seats = theater.premium_seats
            total_tickets = theater.total_seats if total_tickets is None else total_tickets
        event.total_tickets = total_tickets or 0
        event.remaining_tickets = total_tickets or 0
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make


# =============================================================================
# In-memory EventStore
# =============================================================================


class InMemoryEventStore(EventStore):
    """
    Thread-safe EventStore keeping EventState snapshots in a dict.

    `before_commit` (if set) is called with the event id right before each
    conditional write, outside the lock, so tests can interleave a competing
    write between a read and the commit that depends on it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.events = {}
        self.bookings = {}
        self.before_commit = None
        self.commits = 0
        self.conflicts = 0

    def add_event(self, event: EventState) -> EventState:
        self.events[event.id] = event
        return event

    def touch(self, event_id) -> None:
        """Bump the event version as an unrelated concurrent write would."""
        with self._lock:
            event = self.events[event_id]
            self.events[event_id] = dataclasses.replace(event, version=event.version + 1)

    def get_event(self, event_id):
        with self._lock:
            return self.events.get(event_id)

    def get_booking(self, booking_id):
        with self._lock:
            return self.bookings.get(booking_id)

    def commit_allocation(self, event_id, expected_version, booking, remaining_tickets):
        if self.before_commit:
            self.before_commit(event_id)
        with self._lock:
            event = self.events.get(event_id)
            if event is None or event.version != expected_version:
                self.conflicts += 1
                return False
            claimed = tuple(
                BookedSeat(
                    row=s.row, seat_number=s.seat_number, section=s.section, booking_id=booking.id
                )
                for s in booking.selected_seats
            )
            taken = {b.identity for b in event.booked_seats}
            if any(c.identity in taken for c in claimed):
                self.conflicts += 1
                return False

            self.events[event_id] = dataclasses.replace(
                event,
                version=event.version + 1,
                remaining_tickets=remaining_tickets,
                booked_seats=event.booked_seats + claimed,
            )
            self.bookings[booking.id] = BookingState(
                id=booking.id,
                event_id=event_id,
                user_id=booking.user_id,
                status=BookingStatus.CONFIRMED,
                number_of_tickets=booking.number_of_tickets,
                has_theater_seating=booking.has_theater_seating,
            )
            self.commits += 1
            return True

    def commit_release(self, event_id, expected_version, booking_id, remaining_tickets):
        if self.before_commit:
            self.before_commit(event_id)
        with self._lock:
            event = self.events.get(event_id)
            if event is None or event.version != expected_version:
                self.conflicts += 1
                return False
            self.events[event_id] = dataclasses.replace(
                event,
                version=event.version + 1,
                remaining_tickets=remaining_tickets,
                booked_seats=tuple(b for b in event.booked_seats if b.booking_id != booking_id),
            )
            self.bookings[booking_id] = dataclasses.replace(
                self.bookings[booking_id], status=BookingStatus.CANCELLED
            )
            self.commits += 1
            return True


@pytest.fixture
def memory_store():
    return InMemoryEventStore()


@pytest.fixture
def seated_event(memory_store):
    """Add a seated 5x10 event (A1 vip, A3 premium) to the in-memory store."""

    def _make(layout=None, seat_config=None, pricing=None, remaining=None, ticket_price="25"):
        layout = layout or build_layout(5, 10)
        if seat_config is None:
            seat_config = [
                SeatConfig(row="A", seat_number=1, seat_type=SeatType.VIP),
                SeatConfig(row="A", seat_number=3, seat_type=SeatType.PREMIUM),
            ]
        return memory_store.add_event(EventState(
            id=uuid.uuid4(),
            has_theater_seating=True,
            ticket_price=Decimal(ticket_price),
            remaining_tickets=50 if remaining is None else remaining,
            version=1,
            layout=layout,
            seat_config=tuple(seat_config),
            seat_pricing=dict(DEFAULT_PRICING if pricing is None else pricing),
        ))

    return _make


@pytest.fixture
def general_event(memory_store):
    def _make(remaining=10, ticket_price="25"):
        return memory_store.add_event(EventState(
            id=uuid.uuid4(),
            has_theater_seating=False,
            ticket_price=Decimal(ticket_price),
            remaining_tickets=remaining,
            version=1,
        ))

    return _make
