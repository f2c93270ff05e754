"""Pydantic schemas for request and response bodies."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=8)


class LoginRequest(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class LoginResponse(BaseModel):
    token: str
    user: UserOut


class FriendOut(BaseModel):
    id: int
    username: str
    friends_since: Optional[datetime] = None


class FriendRequestCreate(BaseModel):
    sender_id: int
    receiver_id: int


class FriendRequestOut(BaseModel):
    id: int
    sender_id: int
    sender_username: str
    receiver_id: int
    receiver_username: str
    created_at: Optional[datetime] = None


class MessageCreate(BaseModel):
    sender_id: int
    receiver_id: int
    message: str = Field(..., max_length=4000)

    @field_validator("message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message must not be empty")
        return value


class MessageOut(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    message: str
    timestamp: datetime


class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    date: str = ""
    time: str = ""
    priority: str = Field("Medium", pattern=r"^(Low|Medium|High)$")
    workload: str = ""
    completed: bool = False
    shared_with: List[int] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    id: int
    completed: bool


class TaskOut(BaseModel):
    id: int
    owner_id: int
    owner_username: str
    name: str
    date: str
    time: str
    priority: str
    workload: str
    completed: bool
