"""Confirmed friendship routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..shared.logging_config import configure_logging
from . import schemas
from .config import LOG_FILE
from .database import get_db
from .models import Friendship, User
from .users import get_user_or_404

router = APIRouter(prefix="/friends", tags=["friends"])
logger = configure_logging(__name__, LOG_FILE)


def are_friends(db: Session, user_id: int, other_id: int) -> bool:
    return (
        db.query(Friendship).filter(Friendship.user_id == user_id, Friendship.friend_id == other_id).first()
        is not None
    )


def befriend(db: Session, user_id: int, other_id: int) -> Friendship:
    """Write both directions of the relation; existing rows are reused."""
    rows = []
    for a, b in ((user_id, other_id), (other_id, user_id)):
        row = db.query(Friendship).filter(Friendship.user_id == a, Friendship.friend_id == b).first()
        if row is None:
            row = Friendship(user_id=a, friend_id=b)
            db.add(row)
        rows.append(row)
    db.flush()
    return rows[0]


@router.get("/{user_id}", response_model=List[schemas.FriendOut])
def list_friends(user_id: int, db: Session = Depends(get_db)):
    get_user_or_404(db, user_id)
    rows = (
        db.query(Friendship, User)
        .join(User, User.id == Friendship.friend_id)
        .filter(Friendship.user_id == user_id)
        .order_by(User.username)
        .all()
    )
    return [schemas.FriendOut(id=user.id, username=user.username, friends_since=row.created_at) for row, user in rows]


@router.delete("/{user_id}/{friend_id}")
def remove_friend(user_id: int, friend_id: int, db: Session = Depends(get_db)):
    deleted = (
        db.query(Friendship)
        .filter(
            ((Friendship.user_id == user_id) & (Friendship.friend_id == friend_id))
            | ((Friendship.user_id == friend_id) & (Friendship.friend_id == user_id))
        )
        .delete(synchronize_session=False)
    )
    if not deleted:
        raise HTTPException(status_code=404, detail="Not friends")
    db.commit()
    logger.info("FRIEND_REMOVED user_id=%s friend_id=%s", user_id, friend_id)
    return {"message": "Friend removed"}
