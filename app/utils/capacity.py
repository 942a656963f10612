from typing import Iterable

from app.domain.models import Capacity
from app.models.theater import SeatType
from app.schemas.layout import SeatConfig, TheaterLayout


def compute_capacity(layout: TheaterLayout, seat_config: Iterable[SeatConfig]) -> Capacity:
    """
    Recompute seat aggregates from scratch.

    total   = main rows x seats + balcony rows x seats (only with a balcony)
              - seat config entries that are inactive or of type disabled,
              never below zero
    vip     = active seat config entries of type vip
    premium = active seat config entries of type premium
    """
    seat_config = list(seat_config)

    main = layout.main_floor
    main_seats = main.rows * main.seats_per_row
    balcony_seats = 0
    if layout.has_balcony and layout.balcony is not None:
        balcony_seats = layout.balcony.rows * layout.balcony.seats_per_row

    disabled_count = sum(
        1 for s in seat_config if not s.is_active or s.seat_type == SeatType.DISABLED
    )

    return Capacity(
        total_seats=max(0, main_seats + balcony_seats - disabled_count),
        vip_seats=sum(1 for s in seat_config if s.seat_type == SeatType.VIP and s.is_active),
        premium_seats=sum(1 for s in seat_config if s.seat_type == SeatType.PREMIUM and s.is_active),
    )


def apply_capacity(record, layout: TheaterLayout, seat_config: Iterable[SeatConfig]) -> Capacity:
    """
    Overwrite the stored aggregate fields of a Theater or Event row.
    Called explicitly by every write path that touches layout or seat config.
    """
    capacity = compute_capacity(layout, seat_config)
    record.total_seats = capacity.total_seats
    record.vip_seats = capacity.vip_seats
    record.premium_seats = capacity.premium_seats
    return capacity
