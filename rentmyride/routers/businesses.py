import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentmyride.db import get_db
from rentmyride.models.business import Business
from rentmyride.models.user import User, UserRole
from rentmyride.schemas.business import BusinessCreate, BusinessResponse
from rentmyride.schemas.common import Envelope
from rentmyride.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/businesses",
    tags=["businesses"],
)


@router.post("/", response_model=Envelope[BusinessResponse], status_code=status.HTTP_201_CREATED)
def create_business(
    business: BusinessCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a rental business owned by the caller.
    The caller becomes an OWNER.
    """
    db_business = Business(**business.model_dump(), owner_id=current_user.id)
    db.add(db_business)
    if current_user.role != UserRole.OWNER:
        current_user.role = UserRole.OWNER
    db.commit()
    db.refresh(db_business)
    logger.debug(f"Created business {db_business.id} for owner {current_user.id}")
    return {"data": db_business}


@router.get("/mine", response_model=Envelope[List[BusinessResponse]])
def my_businesses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    businesses = db.query(Business).filter(Business.owner_id == current_user.id).order_by(Business.id).all()
    return {"data": businesses}
