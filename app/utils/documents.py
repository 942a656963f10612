"""Conversions between JSON document columns and their pydantic types."""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from app.models.theater import SeatType
from app.schemas.layout import SeatConfig, TheaterLayout


def load_layout(raw: Optional[dict]) -> Optional[TheaterLayout]:
    if raw is None:
        return None
    return TheaterLayout.model_validate(raw)


def dump_layout(layout: TheaterLayout) -> dict:
    return layout.model_dump(mode="json")


def load_seat_config(raw: Optional[list]) -> List[SeatConfig]:
    return [SeatConfig.model_validate(entry) for entry in raw or []]


def dump_seat_config(seat_config: Iterable[SeatConfig]) -> List[dict]:
    return [entry.model_dump(mode="json") for entry in seat_config]


def load_pricing(raw: Optional[dict]) -> Dict[SeatType, Decimal]:
    return {SeatType(k): Decimal(str(v)) for k, v in (raw or {}).items()}


def dump_pricing(pricing: Dict[SeatType, Decimal]) -> Dict[str, str]:
    # Stored as strings so prices survive JSON without float rounding
    return {SeatType(k).value: str(v) for k, v in pricing.items()}
