from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class VehicleBase(BaseModel):
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: int = Field(ge=1900, le=2100)
    color: Optional[str] = None
    seats: Optional[int] = Field(default=None, ge=1)
    transmission: Optional[str] = None
    fuel_type: Optional[str] = None
    price_per_day: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    image: Optional[str] = None


class VehicleCreate(VehicleBase):
    business_id: int


class VehicleUpdate(BaseModel):
    make: Optional[str] = Field(default=None, min_length=1)
    model: Optional[str] = Field(default=None, min_length=1)
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    color: Optional[str] = None
    seats: Optional[int] = Field(default=None, ge=1)
    transmission: Optional[str] = None
    fuel_type: Optional[str] = None
    price_per_day: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    image: Optional[str] = None
    is_available: Optional[bool] = None


class VehicleResponse(VehicleBase):
    id: int
    business_id: int
    price_per_day: float
    is_available: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookedRange(BaseModel):
    """Inclusive ISO date range held by a blocking booking."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
