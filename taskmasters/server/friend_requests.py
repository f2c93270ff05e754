"""Friend request lifecycle routes: send, list, accept, decline, cancel."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..shared.logging_config import configure_logging
from . import schemas
from .config import LOG_FILE
from .database import get_db
from .friends import are_friends, befriend
from .models import PENDING, ACCEPTED, DECLINED, FriendRequest
from .users import get_user_or_404

router = APIRouter(prefix="/requests", tags=["requests"])
logger = configure_logging(__name__, LOG_FILE)


def _out(request: FriendRequest) -> schemas.FriendRequestOut:
    return schemas.FriendRequestOut(
        id=request.id,
        sender_id=request.sender_id,
        sender_username=request.sender.username,
        receiver_id=request.receiver_id,
        receiver_username=request.receiver.username,
        created_at=request.created_at,
    )


def _pending_or_404(db: Session, request_id: int) -> FriendRequest:
    request = (
        db.query(FriendRequest).filter(FriendRequest.id == request_id, FriendRequest.status == PENDING).first()
    )
    if not request:
        raise HTTPException(status_code=404, detail="Friend request not found")
    return request


@router.post("", response_model=schemas.FriendRequestOut, status_code=status.HTTP_201_CREATED)
def send_request(payload: schemas.FriendRequestCreate, db: Session = Depends(get_db)):
    if payload.sender_id == payload.receiver_id:
        raise HTTPException(status_code=400, detail="Cannot send a friend request to yourself")
    get_user_or_404(db, payload.sender_id)
    get_user_or_404(db, payload.receiver_id)
    if are_friends(db, payload.sender_id, payload.receiver_id):
        raise HTTPException(status_code=409, detail="Already friends")
    pending = (
        db.query(FriendRequest)
        .filter(
            FriendRequest.status == PENDING,
            ((FriendRequest.sender_id == payload.sender_id) & (FriendRequest.receiver_id == payload.receiver_id))
            | ((FriendRequest.sender_id == payload.receiver_id) & (FriendRequest.receiver_id == payload.sender_id)),
        )
        .first()
    )
    if pending:
        raise HTTPException(status_code=409, detail="Friend request already pending")

    request = FriendRequest(sender_id=payload.sender_id, receiver_id=payload.receiver_id)
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(
        "FRIEND_REQUEST_SENT request_id=%s sender_id=%s receiver_id=%s",
        request.id,
        request.sender_id,
        request.receiver_id,
    )
    return _out(request)


@router.get("/incoming/{user_id}", response_model=List[schemas.FriendRequestOut])
def incoming(user_id: int, db: Session = Depends(get_db)):
    get_user_or_404(db, user_id)
    rows = (
        db.query(FriendRequest)
        .filter(FriendRequest.receiver_id == user_id, FriendRequest.status == PENDING)
        .order_by(FriendRequest.created_at, FriendRequest.id)
        .all()
    )
    return [_out(r) for r in rows]


@router.get("/outgoing/{user_id}", response_model=List[schemas.FriendRequestOut])
def outgoing(user_id: int, db: Session = Depends(get_db)):
    get_user_or_404(db, user_id)
    rows = (
        db.query(FriendRequest)
        .filter(FriendRequest.sender_id == user_id, FriendRequest.status == PENDING)
        .order_by(FriendRequest.created_at, FriendRequest.id)
        .all()
    )
    return [_out(r) for r in rows]


@router.post("/{request_id}/accept", response_model=schemas.FriendOut)
def accept(request_id: int, db: Session = Depends(get_db)):
    request = _pending_or_404(db, request_id)
    request.status = ACCEPTED
    link = befriend(db, request.receiver_id, request.sender_id)
    db.commit()
    logger.info("FRIEND_REQUEST_ACCEPTED request_id=%s user_id=%s", request.id, request.receiver_id)
    return schemas.FriendOut(id=request.sender_id, username=request.sender.username, friends_since=link.created_at)


@router.post("/{request_id}/decline")
def decline(request_id: int, db: Session = Depends(get_db)):
    request = _pending_or_404(db, request_id)
    request.status = DECLINED
    db.commit()
    logger.info("FRIEND_REQUEST_DECLINED request_id=%s user_id=%s", request.id, request.receiver_id)
    return {"message": "Friend request declined"}


@router.delete("/{request_id}")
def cancel(request_id: int, db: Session = Depends(get_db)):
    request = _pending_or_404(db, request_id)
    sender_id = request.sender_id
    db.delete(request)
    db.commit()
    logger.info("FRIEND_REQUEST_CANCELLED request_id=%s user_id=%s", request_id, sender_id)
    return {"message": "Friend request cancelled"}
