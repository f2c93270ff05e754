"""Personal and shared task routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..shared.logging_config import configure_logging
from . import schemas
from .config import LOG_FILE
from .database import get_db
from .friends import are_friends
from .models import Task, TaskShare
from .users import get_user_or_404

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = configure_logging(__name__, LOG_FILE)


def _out(task: Task) -> schemas.TaskOut:
    return schemas.TaskOut(
        id=task.id,
        owner_id=task.owner_id,
        owner_username=task.owner.username,
        name=task.name,
        date=task.date or "",
        time=task.time or "",
        priority=task.priority or "Medium",
        workload=task.workload or "",
        completed=bool(task.completed),
    )


def _owned_or_404(db: Session, user_id: int, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.owner_id == user_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.get("/shared/{user_id}", response_model=List[schemas.TaskOut])
def shared_tasks(user_id: int, db: Session = Depends(get_db)):
    get_user_or_404(db, user_id)
    tasks = (
        db.query(Task)
        .join(TaskShare, TaskShare.task_id == Task.id)
        .filter(TaskShare.user_id == user_id)
        .order_by(Task.id)
        .all()
    )
    return [_out(t) for t in tasks]


@router.get("/{user_id}", response_model=List[schemas.TaskOut])
def list_tasks(user_id: int, db: Session = Depends(get_db)):
    get_user_or_404(db, user_id)
    tasks = db.query(Task).filter(Task.owner_id == user_id).order_by(Task.id).all()
    return [_out(t) for t in tasks]


@router.post("/{user_id}", response_model=schemas.TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(user_id: int, payload: schemas.TaskCreate, db: Session = Depends(get_db)):
    get_user_or_404(db, user_id)
    for friend_id in payload.shared_with:
        if not are_friends(db, user_id, friend_id):
            raise HTTPException(status_code=400, detail=f"User {friend_id} is not a friend")

    task = Task(
        owner_id=user_id,
        name=payload.name.strip(),
        date=payload.date,
        time=payload.time,
        priority=payload.priority,
        workload=payload.workload,
        completed=payload.completed,
    )
    task.shares = [TaskShare(user_id=friend_id) for friend_id in set(payload.shared_with)]
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("TASK_CREATED user_id=%s task_id=%s shared_with=%s", user_id, task.id, len(task.shares))
    return _out(task)


@router.put("/{user_id}")
def update_task(user_id: int, payload: schemas.TaskUpdate, db: Session = Depends(get_db)):
    task = _owned_or_404(db, user_id, payload.id)
    task.completed = payload.completed
    db.commit()
    return {"message": "Task updated"}


@router.delete("/{user_id}/{task_id}")
def delete_task(user_id: int, task_id: int, db: Session = Depends(get_db)):
    task = _owned_or_404(db, user_id, task_id)
    db.delete(task)
    db.commit()
    logger.info("TASK_DELETED user_id=%s task_id=%s", user_id, task_id)
    return {"message": "Task deleted"}
