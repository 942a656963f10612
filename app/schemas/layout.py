from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from app.models.theater import SeatType, Section, StagePosition


# Range checks on stage/floor geometry live in app.utils.layout.validate_layout
# so every write path reports them as INVALID_LAYOUT.
class Stage(BaseModel):
    position: StagePosition = StagePosition.TOP
    width: int = 80    # percentage of the canvas
    height: int = 15


class FloorInfo(BaseModel):
    rows: int = 0
    seats_per_row: int = 0
    aisle_positions: List[int] = []
    row_labels: List[str] = []

    @field_validator("aisle_positions")
    @classmethod
    def normalize_aisles(cls, v: List[int]) -> List[int]:
        return sorted(set(v))


class LabelPosition(BaseModel):
    x: float = 0
    y: float = 0


# Free-form designer annotation (text or icon placed on the canvas)
class LayoutLabel(BaseModel):
    id: Optional[int] = None
    text: str = ""
    icon: Optional[str] = None
    position: LabelPosition = LabelPosition()
    width: Optional[float] = None
    height: Optional[float] = None


class TheaterLayout(BaseModel):
    stage: Stage = Stage()
    main_floor: FloorInfo
    has_balcony: bool = False
    balcony: Optional[FloorInfo] = None
    removed_seats: List[str] = []
    disabled_seats: List[str] = []
    h_corridors: Dict[str, int] = {}
    v_corridors: Dict[str, int] = {}
    seat_categories: Dict[str, SeatType] = {}
    labels: List[LayoutLabel] = []


class SeatConfig(BaseModel):
    row: str = Field(min_length=1, max_length=20)
    seat_number: int = Field(gt=0)
    seat_type: SeatType = SeatType.STANDARD
    section: Section = Section.MAIN
    is_active: bool = True


# Partial layout update (PUT /theaters/{id}); floors and stage are merged,
# designer collections are replaced wholesale when present.
class StageUpdate(BaseModel):
    position: Optional[StagePosition] = None
    width: Optional[int] = None
    height: Optional[int] = None


class FloorUpdate(BaseModel):
    rows: Optional[int] = None
    seats_per_row: Optional[int] = None
    aisle_positions: Optional[List[int]] = None
    row_labels: Optional[List[str]] = None


class TheaterLayoutUpdate(BaseModel):
    stage: Optional[StageUpdate] = None
    main_floor: Optional[FloorUpdate] = None
    has_balcony: Optional[bool] = None
    balcony: Optional[FloorUpdate] = None
    removed_seats: Optional[List[str]] = None
    disabled_seats: Optional[List[str]] = None
    h_corridors: Optional[Dict[str, int]] = None
    v_corridors: Optional[Dict[str, int]] = None
    seat_categories: Optional[Dict[str, SeatType]] = None
    labels: Optional[List[LayoutLabel]] = None
