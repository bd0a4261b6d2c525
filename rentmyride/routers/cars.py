import logging
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentmyride.config import MAX_LIST_LIMIT
from rentmyride.db import get_db
from rentmyride.models.business import Business
from rentmyride.models.user import User
from rentmyride.models.vehicle import Vehicle
from rentmyride.schemas.common import Envelope
from rentmyride.schemas.vehicle import BookedRange, VehicleCreate, VehicleResponse, VehicleUpdate
from rentmyride.utils.auth import get_current_user
from rentmyride.utils.availability import booked_ranges
from rentmyride.utils.errors import ApiError, ErrorCode

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cars",
    tags=["cars"],
)


def get_vehicle_or_404(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        logger.error(f"Vehicle not found: {vehicle_id}")
        raise ApiError(ErrorCode.NOT_FOUND, "Vehicle not found")
    return vehicle


@router.get("/", response_model=Envelope[List[VehicleResponse]])
def list_cars(
    make: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    available: Optional[bool] = None,
    skip: int = 0,
    limit: int = MAX_LIST_LIMIT,
    db: Session = Depends(get_db),
):
    """
    Browse the catalog.

    - **make**: case-insensitive make filter.
    - **min_price** / **max_price**: bounds on the daily price.
    - **available**: only listed (or only unlisted) vehicles.
    """
    query = db.query(Vehicle)
    if make:
        query = query.filter(Vehicle.make.ilike(make))
    if min_price is not None:
        query = query.filter(Vehicle.price_per_day >= min_price)
    if max_price is not None:
        query = query.filter(Vehicle.price_per_day <= max_price)
    if available is not None:
        query = query.filter(Vehicle.is_available == available)
    vehicles = query.order_by(Vehicle.id).offset(max(skip, 0)).limit(max(1, min(limit, MAX_LIST_LIMIT))).all()
    logger.debug(f"Retrieved {len(vehicles)} vehicles")
    return {"data": vehicles}


@router.get("/{vehicle_id}", response_model=Envelope[VehicleResponse])
def get_car(vehicle_id: int, db: Session = Depends(get_db)):
    return {"data": get_vehicle_or_404(db, vehicle_id)}


@router.get("/{vehicle_id}/availability", response_model=Envelope[List[BookedRange]])
def get_car_availability(vehicle_id: int, db: Session = Depends(get_db)):
    """
    Dates already held by confirmed, active or completed bookings.
    """
    get_vehicle_or_404(db, vehicle_id)
    return {"data": booked_ranges(db, vehicle_id)}


@router.post("/", response_model=Envelope[VehicleResponse], status_code=status.HTTP_201_CREATED)
def create_car(
    vehicle: VehicleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List a new vehicle under one of the caller's businesses.
    """
    business = db.query(Business).filter(Business.id == vehicle.business_id).first()
    if not business:
        raise ApiError(ErrorCode.NOT_FOUND, "Business not found")
    if business.owner_id != current_user.id:
        logger.error(f"User {current_user.id} does not own business {business.id}")
        raise ApiError(ErrorCode.FORBIDDEN, "Not owner")

    db_vehicle = Vehicle(**vehicle.model_dump())
    db.add(db_vehicle)
    db.commit()
    db.refresh(db_vehicle)
    logger.debug(f"Created vehicle {db_vehicle.id} in business {business.id}")
    return {"data": db_vehicle}


@router.put("/{vehicle_id}", response_model=Envelope[VehicleResponse])
def update_car(
    vehicle_id: int,
    vehicle_update: VehicleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    db_vehicle = get_vehicle_or_404(db, vehicle_id)
    if db_vehicle.owner_id != current_user.id:
        logger.error(f"User {current_user.id} not authorized to update vehicle {vehicle_id}")
        raise ApiError(ErrorCode.FORBIDDEN, "Not owner")

    update_data = vehicle_update.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(db_vehicle, key, value)

    db.commit()
    db.refresh(db_vehicle)
    return {"data": db_vehicle}
