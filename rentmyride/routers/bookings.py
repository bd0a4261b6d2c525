import logging
import uuid
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rentmyride.config import CURRENCY, DEFAULT_PAGE_SIZE
from rentmyride.db import get_db
from rentmyride.models.booking import Booking, BookingStatus
from rentmyride.models.payment import Payment, PaymentStatus
from rentmyride.models.review import Review
from rentmyride.models.user import User
from rentmyride.models.vehicle import Vehicle
from rentmyride.schemas.booking import (
    BookingRequest,
    BookingResponse,
    PaymentRequest,
    ReviewCreate,
    ReviewResponse,
)
from rentmyride.schemas.common import Envelope, Page
from rentmyride.utils.auth import get_current_user
from rentmyride.utils.availability import find_conflicting_booking
from rentmyride.utils.booking_state import apply_transition, assert_transition
from rentmyride.utils.errors import NOT_AVAILABLE_MESSAGE, ApiError, ErrorCode, commit_or_raise
from rentmyride.utils.pagination import paginate
from rentmyride.utils.retry import retry_transient
from rentmyride.utils.validation_helpers import rental_days

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/bookings",
    tags=["bookings"],
)


def get_booking_or_404(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        logger.error(f"Booking not found: {booking_id}")
        raise ApiError(ErrorCode.NOT_FOUND, "Booking not found")
    return booking


def is_vehicle_owner(booking: Booking, user: User) -> bool:
    return booking.vehicle.owner_id == user.id


def is_customer(booking: Booking, user: User) -> bool:
    return booking.user_id == user.id


def lost_race(db: Session, booking: Booking, target: BookingStatus):
    db.rollback()
    logger.error(f"Booking {booking.id} changed status before it could move to {target.value}")
    return ApiError(ErrorCode.INVALID_TRANSITION, f"Booking can no longer move to {target.value}")


def transition(db: Session, booking: Booking, target: BookingStatus) -> Booking:
    """Guard, conditionally update and commit a plain status change."""
    assert_transition(booking.status, target)
    if not apply_transition(db, booking.id, target):
        raise lost_race(db, booking, target)
    commit_or_raise(db)
    db.refresh(booking)
    return booking


@router.post(
    "/request",
    response_model=Envelope[BookingResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
)
def request_booking(
    payload: BookingRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Request a vehicle for a date range. The booking starts as PENDING and
    does not hold the vehicle until the owner approves it.

    - **vehicle_id**: vehicle to rent.
    - **start_date** / **end_date**: rental period, end not before start.
    - **pickup_location** / **dropoff_location**: optional.

    The price is the daily rate times the number of started days (at least one).
    """
    logger.debug(f"Booking request by user {current_user.id} for vehicle {payload.vehicle_id}")

    vehicle = db.query(Vehicle).filter(Vehicle.id == payload.vehicle_id).first()
    if not vehicle:
        logger.error(f"Vehicle not found: {payload.vehicle_id}")
        raise ApiError(ErrorCode.NOT_FOUND, "Vehicle not found")
    if payload.end_date < payload.start_date:
        logger.error(f"Bad date range: {payload.start_date} to {payload.end_date}")
        raise ApiError(ErrorCode.INVALID_DATES, "Bad date range")
    if not vehicle.is_available:
        raise ApiError(ErrorCode.NOT_AVAILABLE, NOT_AVAILABLE_MESSAGE)

    days = rental_days(payload.start_date, payload.end_date)
    booking = Booking(
        vehicle_id=vehicle.id,
        user_id=current_user.id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        total_days=days,
        total_price=Decimal(vehicle.price_per_day) * days,
        pickup_location=payload.pickup_location,
        dropoff_location=payload.dropoff_location,
        status=BookingStatus.PENDING,
    )
    db.add(booking)
    commit_or_raise(db)
    db.refresh(booking)
    logger.info(f"Created booking {booking.id}: {days} day(s), total {booking.total_price}")
    return {"data": booking}


@router.get("/mine", response_model=Envelope[Page[BookingResponse]], summary="List my bookings")
def list_my_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    limit: int = DEFAULT_PAGE_SIZE,
    cursor: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    The caller's bookings, newest first.

    - **status**: only bookings in this status.
    - **limit**: page size, clamped to 1..50.
    - **cursor**: ``next_cursor`` of the previous page; malformed values are ignored.
    """
    query = db.query(Booking).filter(Booking.user_id == current_user.id)
    if status_filter is not None:
        query = query.filter(Booking.status == status_filter)
    items, next_cursor = paginate(query, Booking, limit, cursor)
    return {"data": {"items": items, "next_cursor": next_cursor}}


@router.get(
    "/vehicle/{vehicle_id}",
    response_model=Envelope[Page[BookingResponse]],
    summary="List bookings of a vehicle",
)
def list_vehicle_bookings(
    vehicle_id: int,
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    limit: int = DEFAULT_PAGE_SIZE,
    cursor: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Bookings of one vehicle, newest first. Only the vehicle's owner may list them.
    """
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        raise ApiError(ErrorCode.NOT_FOUND, "Vehicle not found")
    if vehicle.owner_id != current_user.id:
        logger.error(f"User {current_user.id} not owner of vehicle {vehicle_id}")
        raise ApiError(ErrorCode.FORBIDDEN, "Not owner")

    query = db.query(Booking).filter(Booking.vehicle_id == vehicle_id)
    if status_filter is not None:
        query = query.filter(Booking.status == status_filter)
    items, next_cursor = paginate(query, Booking, limit, cursor)
    return {"data": {"items": items, "next_cursor": next_cursor}}


@router.get("/{booking_id}", response_model=Envelope[BookingResponse], summary="Get a booking")
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    booking = get_booking_or_404(db, booking_id)
    if not (is_customer(booking, current_user) or is_vehicle_owner(booking, current_user)):
        raise ApiError(ErrorCode.FORBIDDEN, "Not permitted to view this booking")
    return {"data": booking}


@router.post("/{booking_id}/approve", response_model=Envelope[BookingResponse], summary="Approve a booking")
def approve_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Owner confirms a PENDING booking (PENDING -> CONFIRMED).

    Fails with NOT_AVAILABLE when the range overlaps a booking that already
    holds the vehicle, and with INVALID_TRANSITION when the booking left
    PENDING, including when a concurrent approval won the race.
    """
    booking = retry_transient(lambda: get_booking_or_404(db, booking_id), db=db)
    if not is_vehicle_owner(booking, current_user):
        logger.error(f"User {current_user.id} tried to approve booking {booking_id} without owning the vehicle")
        raise ApiError(ErrorCode.FORBIDDEN, "Not owner")
    assert_transition(booking.status, BookingStatus.CONFIRMED)

    def confirm():
        # Row lock serializes approvals for the same vehicle (ignored by SQLite).
        db.query(Vehicle).filter(Vehicle.id == booking.vehicle_id).with_for_update().first()
        conflict = find_conflicting_booking(
            db, booking.vehicle_id, booking.start_date, booking.end_date, exclude_id=booking.id
        )
        if conflict is not None:
            db.rollback()
            logger.error(f"Booking {booking.id} overlaps booking {conflict.id}")
            raise ApiError(ErrorCode.NOT_AVAILABLE, NOT_AVAILABLE_MESSAGE)
        if not apply_transition(db, booking.id, BookingStatus.CONFIRMED):
            raise lost_race(db, booking, BookingStatus.CONFIRMED)
        commit_or_raise(db)

    retry_transient(confirm, db=db)
    db.refresh(booking)
    logger.info(f"Booking {booking.id} confirmed by owner {current_user.id}")
    return {"data": booking}


@router.post("/{booking_id}/pay", response_model=Envelope[BookingResponse], summary="Pay for a booking")
def pay_booking(
    booking_id: int,
    payment_request: Optional[PaymentRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Customer pays a CONFIRMED booking, which activates it (CONFIRMED -> ACTIVE).

    The payment row is upserted in the same transaction as the status change,
    so a booking never has more than one payment.
    """
    booking = get_booking_or_404(db, booking_id)
    if not is_customer(booking, current_user):
        logger.error(f"User {current_user.id} tried to pay booking {booking_id} of user {booking.user_id}")
        raise ApiError(ErrorCode.FORBIDDEN, "Only booking customer can pay")
    assert_transition(booking.status, BookingStatus.ACTIVE)

    method = payment_request.method if payment_request else "CARD"
    payment = db.query(Payment).filter(Payment.booking_id == booking.id).with_for_update().first()
    if payment is None:
        payment = Payment(
            booking_id=booking.id,
            user_id=booking.user_id,
            amount=booking.total_price,
            currency=CURRENCY,
            status=PaymentStatus.COMPLETED,
            method=method,
            transaction_id=uuid.uuid4().hex,
        )
        db.add(payment)
    else:
        payment.status = PaymentStatus.COMPLETED

    if not apply_transition(db, booking.id, BookingStatus.ACTIVE):
        raise lost_race(db, booking, BookingStatus.ACTIVE)
    commit_or_raise(db)
    db.refresh(booking)
    logger.info(f"Booking {booking.id} paid ({payment.amount} {payment.currency}) and activated")
    return {"data": booking}


@router.post("/{booking_id}/complete", response_model=Envelope[BookingResponse], summary="Complete a booking")
def complete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Close an ACTIVE rental (ACTIVE -> COMPLETED). Customer or owner.
    """
    booking = get_booking_or_404(db, booking_id)
    if not (is_customer(booking, current_user) or is_vehicle_owner(booking, current_user)):
        raise ApiError(ErrorCode.FORBIDDEN, "Not permitted to complete this booking")
    transition(db, booking, BookingStatus.COMPLETED)
    logger.info(f"Booking {booking.id} completed")
    return {"data": booking}


@router.post("/{booking_id}/cancel", response_model=Envelope[BookingResponse], summary="Cancel a booking")
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Cancel a PENDING or CONFIRMED booking. Customer or owner.
    """
    booking = get_booking_or_404(db, booking_id)
    if not (is_customer(booking, current_user) or is_vehicle_owner(booking, current_user)):
        logger.error(f"User {current_user.id} not permitted to cancel booking {booking_id}")
        raise ApiError(ErrorCode.FORBIDDEN, "Not permitted to cancel this booking")
    transition(db, booking, BookingStatus.CANCELLED)
    logger.info(f"Booking {booking.id} cancelled by user {current_user.id}")
    return {"data": booking}


@router.post(
    "/{booking_id}/review",
    response_model=Envelope[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Review a completed booking",
)
def review_booking(
    booking_id: int,
    review: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    booking = get_booking_or_404(db, booking_id)
    if not is_customer(booking, current_user):
        raise ApiError(ErrorCode.FORBIDDEN, "Only booking customer can review")
    if booking.status != BookingStatus.COMPLETED:
        raise ApiError(ErrorCode.INVALID_TRANSITION, "Only completed bookings can be reviewed")
    if booking.review is not None:
        raise ApiError(ErrorCode.ALREADY_EXISTS, "Booking already reviewed")

    db_review = Review(
        booking_id=booking.id,
        author_id=current_user.id,
        vehicle_id=booking.vehicle_id,
        rating=review.rating,
        comment=review.comment,
    )
    db.add(db_review)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise ApiError(ErrorCode.ALREADY_EXISTS, "Booking already reviewed") from err
    db.refresh(db_review)
    return {"data": db_review}
