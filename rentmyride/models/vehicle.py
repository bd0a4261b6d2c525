from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from rentmyride.db import Base
from rentmyride.utils.validation_helpers import utcnow


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    make = Column(String, nullable=False, index=True)
    model = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String, nullable=True)
    seats = Column(Integer, nullable=True)
    transmission = Column(String, nullable=True)
    fuel_type = Column(String, nullable=True)
    price_per_day = Column(Numeric(10, 2), nullable=False)
    image = Column(String, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    business = relationship("Business", back_populates="vehicles")
    bookings = relationship("Booking", back_populates="vehicle")

    @property
    def owner_id(self):
        return self.business.owner_id if self.business is not None else None
