"""In-memory stand-in for APIClient used by controller tests."""
import asyncio
from typing import Any, Dict, List, Optional

from taskmasters.client.errors import Result


class FakeGateway:
    """Records calls and answers from ``responses``.

    A response may be a ``Result`` or a callable taking the call's arguments.
    Setting ``gates[name]`` to an ``asyncio.Event`` holds that call until the
    event is set, which lets tests reorder completions.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.responses: Dict[str, Any] = {
            "search_users": Result.success([]),
            "get_friends": Result.success([]),
            "get_incoming_requests": Result.success([]),
            "get_outgoing_requests": Result.success([]),
            "send_friend_request": Result.success(None),
            "accept_request": Result.success(None),
            "decline_request": Result.success(None),
            "cancel_request": Result.success(None),
            "remove_friend": Result.success(None),
            "get_messages": Result.success([]),
            "send_message": Result.success(None),
            "get_tasks": Result.success([]),
            "get_shared_tasks": Result.success([]),
            "create_task": Result.success(None),
            "update_task": Result.success(None),
            "delete_task": Result.success(None),
        }

    def calls_to(self, name: str) -> List[tuple]:
        return [call[1:] for call in self.calls if call[0] == name]

    def gate(self, name: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[name] = event
        return event

    async def _respond(self, name: str, *args) -> Result:
        self.calls.append((name,) + args)
        gate: Optional[asyncio.Event] = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        response = self.responses[name]
        if callable(response):
            response = response(*args)
        return response

    async def search_users(self, username):
        return await self._respond("search_users", username)

    async def get_friends(self, user_id):
        return await self._respond("get_friends", user_id)

    async def get_incoming_requests(self, user_id):
        return await self._respond("get_incoming_requests", user_id)

    async def get_outgoing_requests(self, user_id):
        return await self._respond("get_outgoing_requests", user_id)

    async def send_friend_request(self, sender_id, receiver_id):
        return await self._respond("send_friend_request", sender_id, receiver_id)

    async def accept_request(self, request_id):
        return await self._respond("accept_request", request_id)

    async def decline_request(self, request_id):
        return await self._respond("decline_request", request_id)

    async def cancel_request(self, request_id):
        return await self._respond("cancel_request", request_id)

    async def remove_friend(self, user_id, friend_id):
        return await self._respond("remove_friend", user_id, friend_id)

    async def get_messages(self, user_id, friend_id):
        return await self._respond("get_messages", user_id, friend_id)

    async def send_message(self, sender_id, receiver_id, body):
        return await self._respond("send_message", sender_id, receiver_id, body)

    async def get_tasks(self, user_id):
        return await self._respond("get_tasks", user_id)

    async def get_shared_tasks(self, user_id):
        return await self._respond("get_shared_tasks", user_id)

    async def create_task(self, user_id, draft):
        return await self._respond("create_task", user_id, draft)

    async def update_task(self, user_id, task_id, completed):
        return await self._respond("update_task", user_id, task_id, completed)

    async def delete_task(self, user_id, task_id):
        return await self._respond("delete_task", user_id, task_id)
