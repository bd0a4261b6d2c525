"""
Seed demo data: an owner with a business and two vehicles, a customer, and
one confirmed booking. Safe to run repeatedly.

    python -m rentmyride.seed
"""

import logging
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from rentmyride.config import LOG_LEVEL
from rentmyride.db import SessionLocal, init_database
from rentmyride.models.booking import Booking, BookingStatus
from rentmyride.models.business import Business
from rentmyride.models.user import User, UserRole
from rentmyride.models.vehicle import Vehicle
from rentmyride.utils.auth import get_password_hash
from rentmyride.utils.validation_helpers import rental_days, utcnow

logger = logging.getLogger(__name__)

OWNER_EMAIL = "owner@rentmyride.com"
CUSTOMER_EMAIL = "customer@rentmyride.com"
DEMO_PASSWORD = "password123"

VEHICLES = [
    {"make": "Toyota", "model": "Yaris", "year": 2023, "color": "White", "seats": 5,
     "transmission": "Automatic", "fuel_type": "Gasoline", "price_per_day": Decimal("45.99")},
    {"make": "Hyundai", "model": "i20", "year": 2022, "color": "Blue", "seats": 5,
     "transmission": "Manual", "fuel_type": "Gasoline", "price_per_day": Decimal("38.50")},
]


def get_or_create_user(db: Session, email: str, name: str, role: UserRole) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(email=email, name=name, role=role, hashed_password=get_password_hash(DEMO_PASSWORD))
        db.add(user)
        db.flush()
        logger.info(f"Created user {user.id} ({email})")
    return user


def seed(db: Session) -> dict:
    owner = get_or_create_user(db, OWNER_EMAIL, "Owner", UserRole.OWNER)
    customer = get_or_create_user(db, CUSTOMER_EMAIL, "Customer", UserRole.CUSTOMER)

    business = db.query(Business).filter(Business.owner_id == owner.id, Business.name == "OwnerRentals").first()
    if business is None:
        business = Business(name="OwnerRentals", description="Demo rental business", city="Springfield", owner_id=owner.id)
        db.add(business)
        db.flush()

    vehicles = []
    for fields in VEHICLES:
        vehicle = (
            db.query(Vehicle)
            .filter(Vehicle.business_id == business.id, Vehicle.make == fields["make"], Vehicle.model == fields["model"])
            .first()
        )
        if vehicle is None:
            vehicle = Vehicle(business_id=business.id, **fields)
            db.add(vehicle)
            db.flush()
        vehicles.append(vehicle)

    booking = db.query(Booking).filter(Booking.vehicle_id == vehicles[0].id, Booking.user_id == customer.id).first()
    if booking is None:
        start = utcnow().replace(hour=10, minute=0, second=0, microsecond=0) + timedelta(days=7)
        end = start + timedelta(days=5)
        days = rental_days(start, end)
        booking = Booking(
            vehicle_id=vehicles[0].id,
            user_id=customer.id,
            start_date=start,
            end_date=end,
            total_days=days,
            total_price=vehicles[0].price_per_day * days,
            status=BookingStatus.CONFIRMED,
        )
        db.add(booking)

    db.commit()
    return {"owner": owner, "customer": customer, "business": business, "vehicles": vehicles, "booking": booking}


def main():
    logging.basicConfig(level=LOG_LEVEL)
    init_database()
    db = SessionLocal()
    try:
        result = seed(db)
        logger.info(
            f"Seed complete: owner {result['owner'].id}, customer {result['customer'].id}, "
            f"vehicles {[v.id for v in result['vehicles']]}, booking {result['booking'].id}"
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
