import enum
from sqlalchemy import DDL, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, event
from sqlalchemy.orm import relationship
from rentmyride.db import Base
from rentmyride.utils.validation_helpers import utcnow


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Statuses that hold the vehicle for the booked range.
BLOCKING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.ACTIVE, BookingStatus.COMPLETED)

OVERLAP_CONSTRAINT = "booking_no_overlap_excl"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    total_days = Column(Integer, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    pickup_location = Column(String, nullable=True)
    dropoff_location = Column(String, nullable=True)
    status = Column(
        Enum(BookingStatus, native_enum=False, length=20),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    vehicle = relationship("Vehicle", back_populates="bookings")
    user = relationship("User", back_populates="bookings")
    payment = relationship("Payment", back_populates="booking", uselist=False)
    review = relationship("Review", back_populates="booking", uselist=False)


_blocking_sql = ", ".join(f"'{s.value}'" for s in BLOCKING_STATUSES)

# PostgreSQL only: reject overlapping blocking bookings even across concurrent transactions.
event.listen(
    Booking.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE bookings ADD CONSTRAINT {OVERLAP_CONSTRAINT} "
        "EXCLUDE USING gist (vehicle_id WITH =, tsrange(start_date, end_date, '[]') WITH &&) "
        f"WHERE (status IN ({_blocking_sql}))"
    ).execute_if(dialect="postgresql"),
)
