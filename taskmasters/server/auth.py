"""Account registration and login routes.

Login hands out an opaque bearer token. Resource routes are addressed by user id
and do not check it.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..shared.logging_config import configure_logging
from . import schemas
from .config import LOCKOUT_MINUTES, LOG_FILE, MAX_FAILED_LOGINS
from .database import get_db
from .models import User

router = APIRouter(tags=["auth"])
logger = configure_logging(__name__, LOG_FILE)


def _utcnow() -> datetime:
    # SQLite hands back naive datetimes; compare like with like
    return datetime.now(timezone.utc).replace(tzinfo=None)


@router.post("/register", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    existing = db.query(User).filter(func.lower(User.username) == payload.username.lower()).first()
    if existing:
        raise HTTPException(status_code=409, detail="Username already exists")

    user = User(
        username=payload.username,
        password_hash=bcrypt.hashpw(payload.password.encode(), bcrypt.gensalt()).decode(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("REGISTER_SUCCESS username=%s user_id=%s", user.username, user.id)
    return user


@router.post("/login", response_model=schemas.LoginResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user: Optional[User] = db.query(User).filter(func.lower(User.username) == payload.username.lower()).first()
    if not user:
        logger.info("LOGIN_FAIL username=%s reason=not_found", payload.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    now = _utcnow()
    if user.lock_until and user.lock_until > now:
        logger.warning("ACCOUNT_BLOCKED username=%s locked_until=%s", user.username, user.lock_until)
        raise HTTPException(status_code=403, detail=f"Account locked until {user.lock_until}")

    if not bcrypt.checkpw(payload.password.encode(), user.password_hash.encode()):
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
        if user.failed_login_attempts >= MAX_FAILED_LOGINS:
            user.lock_until = now + timedelta(minutes=LOCKOUT_MINUTES)
            logger.warning("ACCOUNT_BLOCKED username=%s locked_until=%s", user.username, user.lock_until)
        db.commit()
        logger.info("LOGIN_FAIL username=%s reason=bad_password", user.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user.failed_login_attempts = 0
    user.lock_until = None
    db.commit()

    token = secrets.token_urlsafe(32)
    logger.info("LOGIN_SUCCESS username=%s user_id=%s", user.username, user.id)
    return schemas.LoginResponse(token=token, user=schemas.UserOut.model_validate(user))
