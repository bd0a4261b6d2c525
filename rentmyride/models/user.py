import enum
from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship
from rentmyride.db import Base
from rentmyride.utils.validation_helpers import utcnow


class UserRole(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    OWNER = "OWNER"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)
    role = Column(Enum(UserRole, native_enum=False, length=20), nullable=False, default=UserRole.CUSTOMER)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    businesses = relationship("Business", back_populates="owner")
    bookings = relationship("Booking", back_populates="user")
