from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class BusinessCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    city: Optional[str] = None


class BusinessResponse(BusinessCreate):
    id: int
    owner_id: int

    model_config = ConfigDict(from_attributes=True)
