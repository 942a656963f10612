
from app.schemas.common import PaginatedResponse, ErrorResponse
from app.schemas.user import UserSummary, AdminUser, UserRoleUpdate
from app.schemas.layout import (
    Stage, FloorInfo, LayoutLabel, TheaterLayout, SeatConfig,
    StageUpdate, FloorUpdate, TheaterLayoutUpdate,
)
from app.schemas.theater import (
    Theater, TheaterCreate, TheaterUpdate, TheaterSummary, SeatConfigUpdate,
    BookedSeat, TheaterEventView,
)
from app.schemas.event import (
    Event, EventCreate, EventUpdate, EventListItem, EventStatusUpdate,
    SeatStatus, SeatMapResponse,
)
from app.schemas.booking import (
    Booking, BookingCreate, BookingCancelResponse, BookingSeatResponse, SeatRequest,
)
