import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentmyride.db import get_db
from rentmyride.models.user import User
from rentmyride.schemas.auth import LoginRequest, SignupRequest, TokenResponse, UserResponse
from rentmyride.schemas.common import Envelope
from rentmyride.utils.auth import create_access_token, get_current_user, get_password_hash, verify_password
from rentmyride.utils.errors import ApiError, ErrorCode

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


def _token_response(user: User):
    return TokenResponse(id=user.id, name=user.name, email=user.email, token=create_access_token(user.id))


@router.post("/signup", response_model=Envelope[TokenResponse], status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    """
    Register a new customer account and return an access token.
    """
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        logger.error(f"Signup rejected, email already registered: {email}")
        raise ApiError(ErrorCode.ALREADY_EXISTS, "User already exists")

    user = User(name=payload.name, email=email, hashed_password=get_password_hash(payload.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return {"data": _token_response(user)}


@router.post("/login", response_model=Envelope[TokenResponse])
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Exchange email and password for an access token.
    """
    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        logger.error(f"Failed login for {payload.email}")
        raise ApiError(ErrorCode.UNAUTHENTICATED, "Invalid email or password")
    logger.debug(f"User {user.id} logged in")
    return {"data": _token_response(user)}


@router.get("/me", response_model=Envelope[UserResponse])
def me(current_user: User = Depends(get_current_user)):
    return {"data": current_user}
