import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from rentmyride.config import MAX_LIST_LIMIT
from rentmyride.db import get_db
from rentmyride.models.message import Message
from rentmyride.models.user import User
from rentmyride.schemas.common import Envelope
from rentmyride.schemas.message import MessageCreate, MessageResponse
from rentmyride.utils.auth import get_current_user
from rentmyride.utils.errors import ApiError, ErrorCode

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/messages",
    tags=["messages"],
)


@router.post("/", response_model=Envelope[MessageResponse], status_code=status.HTTP_201_CREATED)
def send_message(
    message: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if message.receiver_id == current_user.id:
        raise ApiError(ErrorCode.INVALID_INPUT, "Cannot send a message to yourself")
    if not db.query(User).filter(User.id == message.receiver_id).first():
        raise ApiError(ErrorCode.NOT_FOUND, "Receiver not found")

    db_message = Message(sender_id=current_user.id, receiver_id=message.receiver_id, content=message.content)
    db.add(db_message)
    db.commit()
    db.refresh(db_message)
    logger.debug(f"Message {db_message.id} from {current_user.id} to {message.receiver_id}")
    return {"data": db_message}


@router.get("/", response_model=Envelope[List[MessageResponse]])
def list_messages(
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Messages sent or received by the caller, newest first.
    Archived messages are not included.
    """
    messages = (
        db.query(Message)
        .filter(or_(Message.sender_id == current_user.id, Message.receiver_id == current_user.id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .offset(max(skip, 0))
        .limit(max(1, min(limit, MAX_LIST_LIMIT)))
        .all()
    )
    return {"data": messages}
