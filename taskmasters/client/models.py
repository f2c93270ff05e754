"""Client-side models for users, the friend graph, messages and tasks.

Payloads coming off the wire are validated here: required fields must be present
with the right type, optional fields fall back to the defaults declared on the
dataclass. Anything else raises ``ValueError``.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ..shared.utils import parse_timestamp

PRIORITIES = ("Low", "Medium", "High")


def _require(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise ValueError(f"Missing field '{key}'")
    value = data[key]
    # bool is an int subclass; ids must not accept it
    if kind is int and isinstance(value, bool):
        raise ValueError(f"Field '{key}' must be int")
    if not isinstance(value, kind):
        raise ValueError(f"Field '{key}' must be {kind.__name__}")
    return value


def _optional(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ValueError(f"Field '{key}' must be {kind.__name__}")
    return value


@dataclass(frozen=True)
class User:
    id: int
    username: str

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "User":
        return cls(id=_require(data, "id", int), username=_optional(data, "username", str, ""))


@dataclass(frozen=True)
class Friend:
    id: int
    username: str = ""
    friends_since: Optional[datetime] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Friend":
        return cls(
            id=_require(data, "id", int),
            username=_optional(data, "username", str, ""),
            friends_since=parse_timestamp(data.get("friends_since")),
        )

    def sort_key(self):
        return (self.username.lower(), self.id)


@dataclass(frozen=True)
class FriendRequest:
    id: int
    sender_id: int
    receiver_id: int
    sender_username: str = ""
    receiver_username: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "FriendRequest":
        return cls(
            id=_require(data, "id", int),
            sender_id=_require(data, "sender_id", int),
            receiver_id=_require(data, "receiver_id", int),
            sender_username=_optional(data, "sender_username", str, ""),
            receiver_username=_optional(data, "receiver_username", str, ""),
            created_at=parse_timestamp(data.get("created_at")),
        )

    def peer_id(self, viewer_id: int) -> int:
        return self.receiver_id if self.sender_id == viewer_id else self.sender_id

    def peer_username(self, viewer_id: int) -> str:
        return self.receiver_username if self.sender_id == viewer_id else self.sender_username


@dataclass(frozen=True)
class Message:
    sender_id: int
    receiver_id: int
    body: str
    id: Optional[int] = None
    timestamp: Optional[datetime] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Message":
        return cls(
            sender_id=_require(data, "sender_id", int),
            receiver_id=_optional(data, "receiver_id", int, 0),
            body=_require(data, "message", str),
            id=_optional(data, "id", int, None),
            timestamp=parse_timestamp(data.get("timestamp")),
        )


@dataclass(frozen=True)
class Task:
    id: int
    name: str
    owner_id: int = 0
    date: str = ""
    time: str = ""
    priority: str = "Medium"
    workload: str = ""
    completed: bool = False
    owner_username: str = ""

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Task":
        return cls(
            id=_require(data, "id", int),
            name=_require(data, "name", str),
            owner_id=_optional(data, "owner_id", int, 0),
            date=_optional(data, "date", str, ""),
            time=_optional(data, "time", str, ""),
            priority=_optional(data, "priority", str, "Medium"),
            workload=_optional(data, "workload", str, ""),
            completed=_optional(data, "completed", bool, False),
            owner_username=_optional(data, "owner_username", str, ""),
        )


@dataclass
class TaskDraft:
    name: str = ""
    date: str = ""
    time: str = ""
    priority: str = "Medium"
    workload: str = ""
    shared_with: List[int] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name.strip(),
            "date": self.date,
            "time": self.time,
            "priority": self.priority,
            "workload": self.workload.strip(),
            "completed": False,
            "shared_with": list(self.shared_with),
        }
