"""Direct message routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..shared.logging_config import configure_logging
from . import schemas
from .config import LOG_FILE
from .database import get_db
from .friends import are_friends
from .models import Message
from .users import get_user_or_404

router = APIRouter(prefix="/messages", tags=["messages"])
logger = configure_logging(__name__, LOG_FILE)


def _out(message: Message) -> schemas.MessageOut:
    return schemas.MessageOut(
        id=message.id,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        message=message.body,
        timestamp=message.timestamp,
    )


@router.get("", response_model=List[schemas.MessageOut])
def conversation(user: int = Query(...), friend: int = Query(...), db: Session = Depends(get_db)):
    get_user_or_404(db, user)
    get_user_or_404(db, friend)
    messages = (
        db.query(Message)
        .filter(
            ((Message.sender_id == user) & (Message.receiver_id == friend))
            | ((Message.sender_id == friend) & (Message.receiver_id == user))
        )
        .order_by(Message.timestamp, Message.id)
        .all()
    )
    return [_out(m) for m in messages]


@router.post("", response_model=schemas.MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(payload: schemas.MessageCreate, db: Session = Depends(get_db)):
    sender = get_user_or_404(db, payload.sender_id)
    receiver = get_user_or_404(db, payload.receiver_id)
    if not are_friends(db, sender.id, receiver.id):
        raise HTTPException(status_code=403, detail="You can only message friends")

    message = Message(sender_id=sender.id, receiver_id=receiver.id, body=payload.message)
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info(
        "MESSAGE_SENT sender_id=%s receiver_id=%s message_id=%s",
        sender.id,
        receiver.id,
        message.id,
    )
    return _out(message)
