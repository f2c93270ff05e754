"""One open conversation between the signed-in user and a friend."""
import enum
from typing import List, Optional, Tuple

from ..shared.logging_config import configure_logging
from ..shared.utils import is_blank
from .errors import Result, ValidationFailure, attempt
from .models import Friend, Message, User

logger = configure_logging(__name__)


class SessionState(enum.Enum):
    CLOSED = "closed"
    OPEN = "open"


class ChatSession:
    """Chat lifecycle: CLOSED -> OPEN -> CLOSED, user driven only.

    Messages are append-only while open and are only appended once the server
    has confirmed them. Each open starts a new epoch; a response that belongs
    to an earlier epoch is dropped instead of touching the current transcript.
    """

    def __init__(self, gateway, notifier):
        self.gateway = gateway
        self.notifier = notifier
        self.state = SessionState.CLOSED
        self.user: Optional[User] = None
        self.friend: Optional[Friend] = None
        self.draft = ""
        self.loading = False
        self._messages: List[Message] = []
        self._epoch = 0

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def can_send(self) -> bool:
        return self.is_open and not is_blank(self.draft)

    async def open(self, user: User, friend: Friend) -> Result:
        if self.is_open:
            return Result.success(False)
        self._epoch += 1
        self.state = SessionState.OPEN
        self.user = user
        self.friend = friend
        self._messages = []
        self.draft = ""
        logger.info("CHAT_OPENED user_id=%s friend_id=%s", user.id, friend.id)
        return await self.load_history()

    async def load_history(self) -> Result:
        if not self.is_open:
            return Result.failure(ValidationFailure("Chat is not open"))
        epoch = self._epoch
        user, friend = self.user, self.friend
        self.loading = True
        try:
            result = await attempt(self.gateway.get_messages, user.id, friend.id)
        finally:
            if epoch == self._epoch:
                self.loading = False
        if epoch != self._epoch:
            logger.info("LATE_RESPONSE_DROPPED kind=history friend_id=%s", friend.id)
            return Result.success(False)
        if not result.ok:
            self.notifier.error(f"Failed to load messages: {result.error}")
            return result
        # sends confirmed while the history was in flight stay after it
        history = list(result.value)
        known = {m.id for m in history if m.id is not None}
        sent_meanwhile = [m for m in self._messages if m.id is None or m.id not in known]
        self._messages = history + sent_meanwhile
        return Result.success(True)

    async def send_message(self, body: Optional[str] = None) -> Result:
        if body is not None:
            self.draft = body
        text = self.draft
        if not self.is_open:
            return Result.failure(ValidationFailure("Chat is not open"))
        if is_blank(text):
            return Result.failure(ValidationFailure("Message is empty"))

        epoch = self._epoch
        user, friend = self.user, self.friend
        result = await attempt(self.gateway.send_message, user.id, friend.id, text)
        if epoch != self._epoch:
            logger.info("LATE_RESPONSE_DROPPED kind=send friend_id=%s", friend.id)
            return Result.success(False)
        if not result.ok:
            self.notifier.error(f"Failed to send message: {result.error}")
            return result
        self._messages.append(result.value)
        if self.draft == text:
            self.draft = ""
        logger.info("MESSAGE_SENT sender_id=%s receiver_id=%s message_id=%s", user.id, friend.id, result.value.id)
        return Result.success(result.value)

    def close(self) -> None:
        if not self.is_open:
            return
        logger.info("CHAT_CLOSED user_id=%s friend_id=%s", self.user.id, self.friend.id)
        self._epoch += 1
        self.state = SessionState.CLOSED
        self._messages = []
        self.draft = ""
        self.loading = False
