"""HTTP API client for the TaskMasters backend.

Every public operation is a coroutine returning a :class:`Result`. The blocking
``requests`` call runs in a worker thread, so several operations can be in
flight at once on one event loop. Transport errors and non-2xx answers are
folded into ``NetworkFailure`` and ``ServerRejected``; callers never see a raw
``requests`` exception.
"""
import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from ..shared.logging_config import configure_logging
from .errors import ClientError, NetworkFailure, Result, ServerRejected
from .models import Friend, FriendRequest, Message, Task, TaskDraft, User

T = TypeVar("T")

logger = configure_logging(__name__)


def _list_of(parser: Callable[[Any], T]) -> Callable[[Any], List[T]]:
    def parse(data: Any) -> List[T]:
        if not isinstance(data, list):
            raise ValueError(f"Expected a list, got {type(data).__name__}")
        return [parser(item) for item in data]

    return parse


def _ignore(_: Any) -> None:
    return None


class APIClient:
    def __init__(self, base_url: str, timeout: float = 10.0, session: Any = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token: Optional[str] = None
        # anything exposing requests' request(method, url, ...) signature
        self._http = session if session is not None else requests

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self._http.request(
                method, url, params=params, json=payload, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise NetworkFailure(f"{method} {path} failed: {exc}") from exc
        if not 200 <= resp.status_code < 300:
            raise ServerRejected(self._detail(resp), status_code=resp.status_code)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise ServerRejected(f"{method} {path} returned invalid JSON", status_code=resp.status_code) from exc

    @staticmethod
    def _detail(resp: Any) -> str:
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("detail"):
            return str(body["detail"])
        return f"Server responded with status {resp.status_code}"

    async def _call(
        self,
        method: str,
        path: str,
        parse: Callable[[Any], T],
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Result[T]:
        try:
            data = await asyncio.to_thread(self._request, method, path, params, payload)
        except ClientError as exc:
            logger.warning("REQUEST_FAIL method=%s path=%s error=%s", method, path, exc)
            return Result.failure(exc)
        try:
            return Result.success(parse(data))
        except ValueError as exc:
            logger.warning("RESPONSE_INVALID method=%s path=%s error=%s", method, path, exc)
            return Result.failure(ServerRejected(f"Malformed response from {path}: {exc}"))

    async def login(self, username: str, password: str) -> Result[User]:
        def parse(data: Any) -> User:
            if not isinstance(data, dict) or not isinstance(data.get("token"), str):
                raise ValueError("Missing token")
            self.token = data["token"]
            return User.from_payload(data.get("user"))

        return await self._call("POST", "/login", parse, payload={"username": username, "password": password})

    async def register(self, username: str, password: str) -> Result[User]:
        return await self._call(
            "POST", "/register", User.from_payload, payload={"username": username, "password": password}
        )

    async def search_users(self, username: str) -> Result[List[User]]:
        return await self._call("GET", "/users/search", _list_of(User.from_payload), params={"username": username})

    async def get_friends(self, user_id: int) -> Result[List[Friend]]:
        return await self._call("GET", f"/friends/{user_id}", _list_of(Friend.from_payload))

    async def get_incoming_requests(self, user_id: int) -> Result[List[FriendRequest]]:
        return await self._call("GET", f"/requests/incoming/{user_id}", _list_of(FriendRequest.from_payload))

    async def get_outgoing_requests(self, user_id: int) -> Result[List[FriendRequest]]:
        return await self._call("GET", f"/requests/outgoing/{user_id}", _list_of(FriendRequest.from_payload))

    async def send_friend_request(self, sender_id: int, receiver_id: int) -> Result[FriendRequest]:
        return await self._call(
            "POST",
            "/requests",
            FriendRequest.from_payload,
            payload={"sender_id": sender_id, "receiver_id": receiver_id},
        )

    async def accept_request(self, request_id: int) -> Result[Friend]:
        return await self._call("POST", f"/requests/{request_id}/accept", Friend.from_payload)

    async def decline_request(self, request_id: int) -> Result[None]:
        return await self._call("POST", f"/requests/{request_id}/decline", _ignore)

    async def cancel_request(self, request_id: int) -> Result[None]:
        return await self._call("DELETE", f"/requests/{request_id}", _ignore)

    async def remove_friend(self, user_id: int, friend_id: int) -> Result[None]:
        return await self._call("DELETE", f"/friends/{user_id}/{friend_id}", _ignore)

    async def get_messages(self, user_id: int, friend_id: int) -> Result[List[Message]]:
        return await self._call(
            "GET", "/messages", _list_of(Message.from_payload), params={"user": user_id, "friend": friend_id}
        )

    async def send_message(self, sender_id: int, receiver_id: int, body: str) -> Result[Message]:
        return await self._call(
            "POST",
            "/messages",
            Message.from_payload,
            payload={"sender_id": sender_id, "receiver_id": receiver_id, "message": body},
        )

    async def get_tasks(self, user_id: int) -> Result[List[Task]]:
        return await self._call("GET", f"/tasks/{user_id}", _list_of(Task.from_payload))

    async def get_shared_tasks(self, user_id: int) -> Result[List[Task]]:
        return await self._call("GET", f"/tasks/shared/{user_id}", _list_of(Task.from_payload))

    async def create_task(self, user_id: int, draft: TaskDraft) -> Result[Task]:
        return await self._call("POST", f"/tasks/{user_id}", Task.from_payload, payload=draft.to_payload())

    async def update_task(self, user_id: int, task_id: int, completed: bool) -> Result[None]:
        return await self._call("PUT", f"/tasks/{user_id}", _ignore, payload={"id": task_id, "completed": completed})

    async def delete_task(self, user_id: int, task_id: int) -> Result[None]:
        return await self._call("DELETE", f"/tasks/{user_id}/{task_id}", _ignore)
