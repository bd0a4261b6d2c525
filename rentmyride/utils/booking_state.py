"""Booking state machine."""

import logging
from sqlalchemy.orm import Session

from rentmyride.models.booking import Booking, BookingStatus
from rentmyride.utils.errors import ApiError, ErrorCode
from rentmyride.utils.validation_helpers import utcnow

logger = logging.getLogger(__name__)

BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.ACTIVE, BookingStatus.CANCELLED},
    BookingStatus.ACTIVE: {BookingStatus.COMPLETED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in BOOKING_TRANSITIONS.get(current, set())


def sources_for(target: BookingStatus):
    """Statuses from which ``target`` can be reached."""
    return [s for s, targets in BOOKING_TRANSITIONS.items() if target in targets]


def assert_transition(current: BookingStatus, target: BookingStatus) -> None:
    if not can_transition(current, target):
        logger.error(f"Rejected transition {current.value} -> {target.value}")
        raise ApiError(
            ErrorCode.INVALID_TRANSITION,
            f"Cannot move booking from {current.value} to {target.value}",
        )


def apply_transition(db: Session, booking_id: int, target: BookingStatus) -> bool:
    """
    Conditionally move a booking to ``target``.

    Issues ``UPDATE bookings SET status = target WHERE id = :id AND status IN (sources)``
    so a concurrent writer that already moved the row makes this update match
    nothing. Returns whether the row was updated. Does not commit.
    """
    updated = (
        db.query(Booking)
        .filter(Booking.id == booking_id, Booking.status.in_(sources_for(target)))
        .update({Booking.status: target, Booking.updated_at: utcnow()}, synchronize_session=False)
    )
    logger.debug(f"Transition booking {booking_id} -> {target.value}: {updated} row(s)")
    return updated == 1
