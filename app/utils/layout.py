from typing import Dict, Iterable, Iterator, List, Tuple

from app.domain.errors import InvalidLayoutError
from app.domain.models import Seat, SeatIdentity, SeatRef, seat_identity
from app.models.theater import SeatType, Section
from app.schemas.layout import FloorInfo, SeatConfig, TheaterLayout, TheaterLayoutUpdate

STAGE_WIDTH_RANGE = (20, 100)
STAGE_HEIGHT_RANGE = (5, 40)

MAIN_ROW_PREFIX = ""
BALCONY_ROW_PREFIX = "BALC-"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def _default_row_label(index: int, prefix: str = "") -> str:
    if index < 26:
        return prefix + chr(ord("A") + index)
    return f"{prefix}R{index + 1}"


def generate_row_labels(count: int, prefix: str = "") -> List[str]:
    """
    Default row labels: A..Z for the first 26 rows, then R27, R28, ...
    (the number is the 1-based row index).
    """
    return [_default_row_label(i, prefix) for i in range(count)]


def validate_layout(layout: TheaterLayout) -> None:
    """Raise InvalidLayoutError listing every out-of-range geometry value."""
    problems: List[str] = []

    def check_floor(name: str, floor: FloorInfo) -> None:
        if floor.rows < 0:
            problems.append(f"{name}.rows must be >= 0 (got {floor.rows})")
        if floor.seats_per_row < 0:
            problems.append(f"{name}.seats_per_row must be >= 0 (got {floor.seats_per_row})")

    check_floor("main_floor", layout.main_floor)
    if layout.has_balcony and layout.balcony is not None:
        check_floor("balcony", layout.balcony)

    low, high = STAGE_WIDTH_RANGE
    if not low <= layout.stage.width <= high:
        problems.append(f"stage.width must be between {low} and {high} (got {layout.stage.width})")
    low, high = STAGE_HEIGHT_RANGE
    if not low <= layout.stage.height <= high:
        problems.append(f"stage.height must be between {low} and {high} (got {layout.stage.height})")

    if problems:
        raise InvalidLayoutError(problems)


def with_default_row_labels(layout: TheaterLayout) -> TheaterLayout:
    """
    Fill in generated row labels for floors that have none, and reset the
    balcony to an empty floor when the theater has no balcony.
    """
    main = layout.main_floor
    if not main.row_labels:
        main = main.model_copy(
            update={"row_labels": generate_row_labels(max(main.rows, 0), MAIN_ROW_PREFIX)}
        )

    if layout.has_balcony:
        balcony = layout.balcony or FloorInfo()
        if not balcony.row_labels:
            balcony = balcony.model_copy(
                update={"row_labels": generate_row_labels(max(balcony.rows, 0), BALCONY_ROW_PREFIX)}
            )
    else:
        balcony = FloorInfo()

    return layout.model_copy(update={"main_floor": main, "balcony": balcony})


def apply_layout_update(layout: TheaterLayout, update: TheaterLayoutUpdate) -> TheaterLayout:
    """
    Merge a partial layout update into an existing layout.

    Stage and floors are merged field by field; a floor whose row count changes
    without explicit labels gets regenerated labels. Designer collections
    (removed/disabled seats, corridors, categories, labels) are replaced.
    """
    data = layout.model_dump(mode="json")
    changes = update.model_dump(mode="json", exclude_none=True)

    if "stage" in changes:
        data["stage"].update(changes["stage"])

    for name in ("main_floor", "balcony"):
        if name not in changes:
            continue
        floor = dict(data.get(name) or {})
        floor_changes = changes[name]
        rows_changed = "rows" in floor_changes and floor_changes["rows"] != floor.get("rows")
        floor.update(floor_changes)
        if not floor_changes.get("row_labels") and rows_changed:
            floor["row_labels"] = []
        data[name] = floor

    if "has_balcony" in changes:
        data["has_balcony"] = changes["has_balcony"]

    for name in (
        "removed_seats", "disabled_seats", "h_corridors", "v_corridors",
        "seat_categories", "labels",
    ):
        if name in changes:
            data[name] = changes[name]

    return with_default_row_labels(TheaterLayout.model_validate(data))


def merge_seat_config(
    existing: Iterable[SeatConfig], updates: Iterable[SeatConfig]
) -> List[SeatConfig]:
    """
    Merge seat configuration entries matched on (section, row, seat_number).
    Matching entries take the fields explicitly set on the update; new entries
    are appended in order.
    """
    merged = list(existing)
    positions = {
        seat_identity(c.section, c.row, c.seat_number): i for i, c in enumerate(merged)
    }
    for entry in updates:
        ident = seat_identity(entry.section, entry.row, entry.seat_number)
        if ident in positions:
            i = positions[ident]
            merged[i] = merged[i].model_copy(update=entry.model_dump(exclude_unset=True))
        else:
            positions[ident] = len(merged)
            merged.append(entry)
    return merged


# ---------------------------------------------------------------------------
# Seat enumeration
# ---------------------------------------------------------------------------


def _floors(layout: TheaterLayout) -> Iterator[Tuple[Section, FloorInfo, str]]:
    yield Section.MAIN, layout.main_floor, MAIN_ROW_PREFIX
    if layout.has_balcony and layout.balcony is not None:
        yield Section.BALCONY, layout.balcony, BALCONY_ROW_PREFIX


def row_label(floor: FloorInfo, index: int, prefix: str = "") -> str:
    if index < len(floor.row_labels) and floor.row_labels[index]:
        return floor.row_labels[index]
    return _default_row_label(index, prefix)


def enumerate_seats(layout: TheaterLayout) -> Iterator[SeatRef]:
    """
    Yield every addressable seat: main floor then balcony (when enabled),
    row by row, skipping removed seats. Each call starts a fresh pass over
    the layout.
    """
    removed = set(layout.removed_seats)
    for section, floor, prefix in _floors(layout):
        for row_index in range(max(floor.rows, 0)):
            row = row_label(floor, row_index, prefix)
            for seat_index in range(max(floor.seats_per_row, 0)):
                ref = SeatRef(row=row, seat_number=seat_index + 1, section=section)
                if ref.key in removed:
                    continue
                yield ref


def index_seat_config(seat_config: Iterable[SeatConfig]) -> Dict[SeatIdentity, SeatConfig]:
    return {seat_identity(c.section, c.row, c.seat_number): c for c in seat_config}


def _resolve(
    ref: SeatRef,
    overrides: Dict[SeatIdentity, SeatConfig],
    categories: Dict[str, SeatType],
    disabled: set,
) -> Seat:
    config = overrides.get(ref.identity)
    if config is not None:
        seat_type = SeatType(config.seat_type)
        is_active = config.is_active
    else:
        seat_type = SeatType(categories.get(ref.key, SeatType.STANDARD))
        is_active = True

    if ref.key in disabled or seat_type == SeatType.DISABLED:
        is_active = False
    return Seat(ref=ref, seat_type=seat_type, is_active=is_active)


def resolve_seat(
    layout: TheaterLayout, seat_config: Iterable[SeatConfig], ref: SeatRef
) -> Seat:
    """
    Resolve the category of a seat: explicit seat config entry first, then the
    layout's per-seat category, else standard. Disabled or inactive seats are
    returned with is_active=False (they occupy a cell but cannot be booked).
    """
    return _resolve(
        ref,
        index_seat_config(seat_config),
        layout.seat_categories,
        set(layout.disabled_seats),
    )


def build_seat_index(
    layout: TheaterLayout, seat_config: Iterable[SeatConfig]
) -> Dict[SeatIdentity, Seat]:
    """Map (section, row, seat_number) -> resolved Seat for every enumerable seat."""
    overrides = index_seat_config(seat_config)
    disabled = set(layout.disabled_seats)
    return {
        ref.identity: _resolve(ref, overrides, layout.seat_categories, disabled)
        for ref in enumerate_seats(layout)
    }
