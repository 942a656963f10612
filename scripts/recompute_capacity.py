import logging
import os
import sys

# Add project root to path
sys.path.append(os.getcwd())

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.models.event import Event
from app.models.theater import Theater
from app.utils.capacity import apply_capacity, compute_capacity
from app.utils.documents import load_layout, load_seat_config

logger = logging.getLogger("recompute_capacity")


def recompute_capacity(db: Session) -> int:
    """
    Recompute total/vip/premium seat counts of every theater and seated event
    from its stored layout and seat config. Returns the number of rows fixed.
    """
    fixed = 0
    records = list(db.query(Theater).all())
    records += db.query(Event).filter(Event.layout.isnot(None)).all()

    for record in records:
        layout = load_layout(record.layout)
        if layout is None:
            continue
        seat_config = load_seat_config(record.seat_config)
        capacity = compute_capacity(layout, seat_config)
        current = (record.total_seats, record.vip_seats, record.premium_seats)
        expected = (capacity.total_seats, capacity.vip_seats, capacity.premium_seats)
        if current == expected:
            continue

        logger.info(
            "%s %s: %s -> %s", type(record).__name__, record.id, current, expected
        )
        apply_capacity(record, layout, seat_config)
        fixed += 1

    db.commit()
    return fixed


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        count = recompute_capacity(db)
        logger.info("Recomputed capacity on %d record(s).", count)
    finally:
        db.close()
