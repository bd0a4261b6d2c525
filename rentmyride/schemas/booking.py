from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from rentmyride.models.booking import BookingStatus
from rentmyride.utils.validation_helpers import to_naive_utc


class BookingRequest(BaseModel):
    vehicle_id: int
    start_date: datetime
    end_date: datetime
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)


class PaymentRequest(BaseModel):
    method: str = "CARD"


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    vehicle_id: int
    user_id: int
    start_date: datetime
    end_date: datetime
    total_days: int
    total_price: float
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    vehicle_id: int
    author_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
