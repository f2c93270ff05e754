"""User search routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from . import schemas
from .config import SEARCH_LIMIT
from .database import get_db
from .models import User

router = APIRouter(prefix="/users", tags=["users"])


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/search", response_model=List[schemas.UserOut])
def search_users(username: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    term = username.strip()
    if not term:
        raise HTTPException(status_code=400, detail="Search term is required")
    return (
        db.query(User)
        .filter(User.username.ilike(f"%{term}%"))
        .order_by(User.username)
        .limit(SEARCH_LIMIT)
        .all()
    )
