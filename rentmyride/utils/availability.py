from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from rentmyride.models.booking import Booking, BLOCKING_STATUSES


def find_conflicting_booking(
    db: Session,
    vehicle_id: int,
    start_date: datetime,
    end_date: datetime,
    exclude_id: Optional[int] = None,
):
    """
    Return a blocking booking of the vehicle whose range intersects
    ``[start_date, end_date]`` (both ends inclusive), or None.
    """
    query = db.query(Booking).filter(
        Booking.vehicle_id == vehicle_id,
        Booking.status.in_(BLOCKING_STATUSES),
        Booking.start_date <= end_date,
        Booking.end_date >= start_date,
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.first()


def booked_ranges(db: Session, vehicle_id: int):
    """Date ranges held by blocking bookings, shaped for a date picker's disable list."""
    bookings = (
        db.query(Booking)
        .filter(Booking.vehicle_id == vehicle_id, Booking.status.in_(BLOCKING_STATUSES))
        .order_by(Booking.start_date)
        .all()
    )
    return [
        {"from": b.start_date.date().isoformat(), "to": b.end_date.date().isoformat()}
        for b in bookings
    ]
