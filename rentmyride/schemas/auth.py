from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from rentmyride.models.user import UserRole


class SignupRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    token: str
