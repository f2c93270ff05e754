import asyncio
import json
from unittest import mock

import requests

from taskmasters.client.api import APIClient
from taskmasters.client.errors import NetworkFailure, Result, ServerRejected, attempt
from taskmasters.client.models import Friend, FriendRequest, Message, TaskDraft, User


class DummyResponse:
    def __init__(self, status_code=200, payload=None, raw: bytes | None = None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        else:
            self.content = b"" if payload is None else json.dumps(payload).encode("utf-8")

    def json(self):
        return json.loads(self.content.decode("utf-8"))


def _client(*responses):
    session = mock.Mock()
    session.request.side_effect = list(responses)
    return APIClient("https://tm.test/", session=session), session


def test_login_posts_credentials_and_keeps_token():
    api, session = _client(DummyResponse(payload={"token": "tok", "user": {"id": 1, "username": "testuser"}}))

    result = asyncio.run(api.login("testuser", "hunter22"))

    assert result.value == User(1, "testuser")
    assert api.token == "tok"
    args, kwargs = session.request.call_args
    assert args == ("POST", "https://tm.test/login")
    assert kwargs["json"] == {"username": "testuser", "password": "hunter22"}
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert "Authorization" not in kwargs["headers"]


def test_authorized_calls_send_bearer_token():
    api, session = _client(DummyResponse(payload=[]))
    api.token = "tok"

    asyncio.run(api.get_friends(1))

    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"


def test_get_friends_parses_list():
    api, session = _client(
        DummyResponse(payload=[{"id": 2, "username": "friend1", "friends_since": "2025-07-04T12:00:00Z"}])
    )

    result = asyncio.run(api.get_friends(1))

    assert result.ok
    assert result.value[0] == Friend.from_payload(
        {"id": 2, "username": "friend1", "friends_since": "2025-07-04T12:00:00Z"}
    )
    assert session.request.call_args.args == ("GET", "https://tm.test/friends/1")


def test_request_endpoints_and_payloads():
    request_payload = {"id": 10, "sender_id": 1, "receiver_id": 4, "receiver_username": "newuser"}
    api, session = _client(
        DummyResponse(payload=[request_payload]),
        DummyResponse(payload=[]),
        DummyResponse(201, payload=request_payload),
        DummyResponse(payload={"id": 1, "username": "testuser"}),
        DummyResponse(payload={"message": "Friend request declined"}),
        DummyResponse(payload={"message": "Friend request cancelled"}),
        DummyResponse(payload={"message": "Friend removed"}),
    )

    async def scenario():
        outgoing = await api.get_outgoing_requests(1)
        incoming = await api.get_incoming_requests(4)
        created = await api.send_friend_request(1, 4)
        accepted = await api.accept_request(10)
        await api.decline_request(11)
        await api.cancel_request(12)
        await api.remove_friend(1, 2)
        return outgoing, incoming, created, accepted

    outgoing, incoming, created, accepted = asyncio.run(scenario())

    assert outgoing.value == [FriendRequest.from_payload(request_payload)]
    assert incoming.value == []
    assert created.value.receiver_username == "newuser"
    assert accepted.value == Friend(id=1, username="testuser")
    calls = [(c.args, c.kwargs["json"]) for c in session.request.call_args_list]
    assert calls == [
        (("GET", "https://tm.test/requests/outgoing/1"), None),
        (("GET", "https://tm.test/requests/incoming/4"), None),
        (("POST", "https://tm.test/requests"), {"sender_id": 1, "receiver_id": 4}),
        (("POST", "https://tm.test/requests/10/accept"), None),
        (("POST", "https://tm.test/requests/11/decline"), None),
        (("DELETE", "https://tm.test/requests/12"), None),
        (("DELETE", "https://tm.test/friends/1/2"), None),
    ]


def test_search_passes_username_as_query_param():
    api, session = _client(DummyResponse(payload=[{"id": 4, "username": "newuser"}]))

    result = asyncio.run(api.search_users("newuser"))

    assert result.value == [User(4, "newuser")]
    assert session.request.call_args.kwargs["params"] == {"username": "newuser"}


def test_messages_use_message_key_on_the_wire():
    sent = {"id": 9, "sender_id": 1, "receiver_id": 2, "message": "hi", "timestamp": "2025-07-04T12:00:00Z"}
    api, session = _client(DummyResponse(payload=[]), DummyResponse(201, payload=sent))

    async def scenario():
        await api.get_messages(1, 2)
        return await api.send_message(1, 2, "hi")

    result = asyncio.run(scenario())

    first, second = session.request.call_args_list
    assert first.args == ("GET", "https://tm.test/messages")
    assert first.kwargs["params"] == {"user": 1, "friend": 2}
    assert second.kwargs["json"] == {"sender_id": 1, "receiver_id": 2, "message": "hi"}
    assert result.value == Message.from_payload(sent)


def test_task_endpoints():
    task = {"id": 5, "name": "Study", "owner_id": 1, "priority": "High"}
    api, session = _client(
        DummyResponse(payload=[task]),
        DummyResponse(payload=[]),
        DummyResponse(201, payload=task),
        DummyResponse(payload={"message": "Task updated"}),
        DummyResponse(payload={"message": "Task deleted"}),
    )

    async def scenario():
        await api.get_tasks(1)
        await api.get_shared_tasks(1)
        created = await api.create_task(1, TaskDraft(name="Study", priority="High"))
        await api.update_task(1, 5, True)
        await api.delete_task(1, 5)
        return created

    created = asyncio.run(scenario())

    assert created.value.priority == "High"
    urls = [c.args for c in session.request.call_args_list]
    assert urls == [
        ("GET", "https://tm.test/tasks/1"),
        ("GET", "https://tm.test/tasks/shared/1"),
        ("POST", "https://tm.test/tasks/1"),
        ("PUT", "https://tm.test/tasks/1"),
        ("DELETE", "https://tm.test/tasks/1/5"),
    ]
    assert session.request.call_args_list[3].kwargs["json"] == {"id": 5, "completed": True}


def test_transport_error_becomes_network_failure():
    api, _ = _client(requests.ConnectionError("refused"))

    result = asyncio.run(api.get_friends(1))

    assert isinstance(result.error, NetworkFailure)


def test_non_2xx_becomes_server_rejected_with_detail():
    api, _ = _client(DummyResponse(409, payload={"detail": "Friend request already pending"}))

    result = asyncio.run(api.send_friend_request(1, 4))

    assert isinstance(result.error, ServerRejected)
    assert result.error.status_code == 409
    assert str(result.error) == "Friend request already pending"


def test_non_2xx_without_json_body():
    api, _ = _client(DummyResponse(502, raw=b"<html>bad gateway</html>"))

    result = asyncio.run(api.get_friends(1))

    assert result.error.status_code == 502
    assert "502" in str(result.error)


def test_invalid_json_is_rejected():
    api, _ = _client(DummyResponse(200, raw=b"not json"))

    result = asyncio.run(api.get_friends(1))

    assert isinstance(result.error, ServerRejected)


def test_malformed_payload_is_rejected():
    api, _ = _client(DummyResponse(payload=[{"username": "no id"}]), DummyResponse(payload={"not": "a list"}))

    missing_id = asyncio.run(api.get_friends(1))
    not_a_list = asyncio.run(api.get_friends(1))

    assert isinstance(missing_id.error, ServerRejected)
    assert isinstance(not_a_list.error, ServerRejected)


def test_login_without_token_fails():
    api, _ = _client(DummyResponse(payload={"user": {"id": 1, "username": "testuser"}}))

    result = asyncio.run(api.login("testuser", "hunter22"))

    assert isinstance(result.error, ServerRejected)
    assert api.token is None


def test_default_transport_is_requests():
    api = APIClient("https://tm.test", timeout=2.5)
    with mock.patch("requests.request", return_value=DummyResponse(payload=[])) as fake:
        result = asyncio.run(api.get_friends(3))

    assert result.value == []
    assert fake.call_args.args == ("GET", "https://tm.test/friends/3")
    assert fake.call_args.kwargs["timeout"] == 2.5


def test_attempt_folds_raised_client_errors():
    async def ok(value):
        return Result.success(value)

    async def broken(value):
        raise ServerRejected("Friend request already pending", status_code=409)

    assert asyncio.run(attempt(ok, 7)).value == 7
    failed = asyncio.run(attempt(broken, 7))
    assert isinstance(failed.error, ServerRejected)
    assert failed.error.status_code == 409
