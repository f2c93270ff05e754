"""Qt-free render helpers and per-friend chat buttons.

Widgets in ``windows.py`` draw whatever these functions return, so the text
and ordering rules can be exercised without a display.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..chat import ChatSession
from ..friends import FRIENDS, FriendGraphManager
from ..models import Friend, User
from ..tasks import TaskBoard

CHAT_LABEL = "\U0001f4ac Chat"
LOADING_FRIENDS = "Loading your friends..."
NO_FRIENDS = "No friends yet"
NO_FRIENDS_HINT = "Your friend list is waiting. Find people on the Requests tab."
NO_MESSAGES = "No messages yet. Say hello!"


def format_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else "--:--"


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


@dataclass(frozen=True)
class FriendRow:
    friend_id: int
    username: str
    since: str


@dataclass(frozen=True)
class RequestRow:
    request_id: int
    username: str
    sent: str
    status: str
    actions: Tuple[str, ...]


@dataclass(frozen=True)
class TranscriptLine:
    author: str
    time: str
    text: str
    outgoing: bool


@dataclass(frozen=True)
class TaskRow:
    task_id: int
    title: str
    details: str
    completed: bool
    editable: bool


def friends_heading(manager: FriendGraphManager) -> str:
    if manager.loading[FRIENDS] and not manager.friends:
        return LOADING_FRIENDS
    if not manager.friends:
        return NO_FRIENDS
    return f"Your Friends ({len(manager.friends)})"


def friend_rows(friends: Iterable[Friend]) -> List[FriendRow]:
    return [
        FriendRow(friend_id=f.id, username=f.username, since=format_date(f.friends_since)) for f in friends
    ]


def tab_labels(manager: FriendGraphManager) -> Dict[str, str]:
    pending = len(manager.incoming)
    return {
        "friends": f"My Friends ({len(manager.friends)})",
        "requests": f"Requests ({pending})" if pending else "Requests",
    }


def incoming_rows(manager: FriendGraphManager) -> List[RequestRow]:
    return [
        RequestRow(
            request_id=r.id,
            username=r.peer_username(manager.user.id),
            sent=format_date(r.created_at),
            status="Incoming",
            actions=("Accept", "Decline"),
        )
        for r in manager.incoming
    ]


def outgoing_rows(manager: FriendGraphManager) -> List[RequestRow]:
    return [
        RequestRow(
            request_id=r.id,
            username=r.peer_username(manager.user.id),
            sent=format_date(r.created_at),
            status="Pending",
            actions=("Cancel",),
        )
        for r in manager.outgoing
    ]


def transcript_lines(session: ChatSession) -> List[TranscriptLine]:
    """Lines in append order; the last line is always the newest message."""
    if not session.is_open:
        return []
    me = session.user.id
    peer = session.friend.username or f"user {session.friend.id}"
    return [
        TranscriptLine(
            author="you" if m.sender_id == me else peer,
            time=format_time(m.timestamp),
            text=m.body,
            outgoing=m.sender_id == me,
        )
        for m in session.messages
    ]


def task_rows(board: TaskBoard, shared: bool = False) -> List[TaskRow]:
    tasks = board.shared if shared else board.personal
    rows = []
    for t in tasks:
        title = f"{t.name} (Shared by {t.owner_username})" if shared and t.owner_username else t.name
        details = " | ".join(part for part in (t.date, t.time, t.priority, t.workload) if part)
        rows.append(TaskRow(task_id=t.id, title=title, details=details, completed=t.completed, editable=not shared))
    return rows


class ChatButton:
    """Chat toggle for one friend, owning that friend's session exclusively."""

    label = CHAT_LABEL

    def __init__(self, gateway, notifier, user: User, friend: Friend):
        self.user = user
        self.friend = friend
        self.session = ChatSession(gateway, notifier)

    @property
    def is_open(self) -> bool:
        return self.session.is_open

    async def open(self):
        return await self.session.open(self.user, self.friend)

    def close(self) -> None:
        self.session.close()

    async def toggle(self):
        if self.is_open:
            self.close()
            return None
        return await self.open()


def sync_chat_buttons(
    buttons: Dict[int, ChatButton],
    friends: Iterable[Friend],
    factory: Callable[[Friend], ChatButton],
) -> Dict[int, ChatButton]:
    """Keep one button per current friend; buttons of removed friends are closed."""
    current = {f.id: f for f in friends}
    result: Dict[int, ChatButton] = {}
    for friend_id, button in buttons.items():
        if friend_id in current:
            result[friend_id] = button
        else:
            button.close()
    for friend_id, friend in current.items():
        if friend_id not in result:
            result[friend_id] = factory(friend)
    return result
