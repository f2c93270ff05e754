"""Application controller wiring the gateway, notifier and per-user controllers."""
from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from ...shared.logging_config import configure_logging
from ...shared.utils import is_blank, is_password_strong, is_valid_username
from ..api import APIClient
from ..config import ClientConfig, load_config
from ..errors import Result, ValidationFailure
from ..friends import FriendGraphManager
from ..models import Friend, User
from ..notify import BannerNotifier
from ..storage import clear_auth, get_token, get_user, store_auth, store_server_url
from ..tasks import TaskBoard
from .presenters import ChatButton

logger = configure_logging(__name__)


class AppController:
    """Owns everything tied to one signed-in user; logging out disposes it."""

    def __init__(self, config: Optional[ClientConfig] = None, gateway: Optional[APIClient] = None):
        self.config = config or load_config()
        self.api = gateway or APIClient(self.config.base_url, timeout=self.config.timeout)
        self.notifier = BannerNotifier(duration=self.config.banner_seconds)
        self.user: Optional[User] = None
        self.friends: Optional[FriendGraphManager] = None
        self.tasks: Optional[TaskBoard] = None
        stored = get_user()
        if stored and get_token():
            self._start_session(User.from_payload(stored), get_token())

    @property
    def base_url(self) -> str:
        return self.api.base_url

    def set_base_url(self, url: str) -> None:
        url = url.rstrip("/")
        store_server_url(url)
        self.api.base_url = url

    def _start_session(self, user: User, token: Optional[str]) -> None:
        self.user = user
        self.api.token = token
        self.friends = FriendGraphManager(self.api, self.notifier, user)
        self.tasks = TaskBoard(self.api, self.notifier, user)

    async def login(self, username: str, password: str) -> Result:
        if is_blank(username):
            return Result.failure(ValidationFailure("Username is required"))
        if is_blank(password):
            return Result.failure(ValidationFailure("Password is required"))
        result = await self.api.login(username.strip(), password)
        if not result.ok:
            logger.info("LOGIN_FAIL username=%s error=%s", username, result.error)
            return result
        store_auth(self.api.token, asdict(result.value))
        self._start_session(result.value, self.api.token)
        logger.info("LOGIN_SUCCESS user_id=%s", result.value.id)
        return result

    async def register(self, username: str, password: str, confirm: str) -> Result:
        if not is_valid_username(username):
            return Result.failure(ValidationFailure("Username must be 3-32 letters, digits, '.', '_' or '-'"))
        if password != confirm:
            return Result.failure(ValidationFailure("Passwords do not match"))
        if not is_password_strong(password):
            return Result.failure(ValidationFailure("Password does not meet policy"))
        return await self.api.register(username.strip(), password)

    def logout(self) -> None:
        if self.friends:
            self.friends.dispose()
        if self.tasks:
            self.tasks.dispose()
        clear_auth()
        self.api.token = None
        self.user = None
        self.friends = None
        self.tasks = None

    def chat_button(self, friend: Friend) -> ChatButton:
        return ChatButton(self.api, self.notifier, self.user, friend)


__all__ = ["AppController"]
