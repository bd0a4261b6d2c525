from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from rentmyride.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from rentmyride.db import get_db
from rentmyride.models.user import User
from rentmyride.utils.errors import ApiError, ErrorCode

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer scheme for JWT token; missing headers are reported as UNAUTHENTICATED below
bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="Enter 'Bearer <your_jwt_token>'. Obtain the token via /api/auth/login.",
    auto_error=False,
)


def verify_password(plain_password, hashed_password):
    """Verify a plain password against a hashed password."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    """Hash a password for storage."""
    return pwd_context.hash(password)


def create_access_token(user_id: int, expires_minutes: Optional[int] = None):
    """Create a JWT access token for a user id with an expiration time."""
    minutes = ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Verify JWT token from Bearer header and return the current user."""
    if credentials is None:
        raise ApiError(ErrorCode.UNAUTHENTICATED, "Auth required")
    try:
        payload = jwt.decode(credentials.credentials, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError) as e:
        raise ApiError(ErrorCode.UNAUTHENTICATED, f"Could not validate credentials: {e}") from e

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise ApiError(ErrorCode.UNAUTHENTICATED, "Could not validate credentials")
    return user
