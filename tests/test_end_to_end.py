"""Controllers driven against the real FastAPI app through its test client."""
import asyncio

from taskmasters.client.api import APIClient
from taskmasters.client.chat import ChatSession
from taskmasters.client.errors import DuplicateRequest, NotFound, ServerRejected
from taskmasters.client.friends import FriendGraphManager
from taskmasters.client.models import TaskDraft
from taskmasters.client.notify import BannerNotifier
from taskmasters.client.tasks import TaskBoard

PASSWORD = "correct-horse"


def _sign_in(server_client, username):
    api = APIClient("http://testserver", session=server_client)
    assert asyncio.run(api.register(username, PASSWORD)).ok
    user = asyncio.run(api.login(username, PASSWORD)).unwrap()
    return api, user


def test_friendship_then_chat(server_client):
    alice_api, alice = _sign_in(server_client, "alice")
    bob_api, bob = _sign_in(server_client, "bob")
    alice_friends = FriendGraphManager(alice_api, BannerNotifier(), alice)
    bob_friends = FriendGraphManager(bob_api, BannerNotifier(), bob)

    sent = asyncio.run(alice_friends.send_request("BOB"))
    assert sent.ok
    assert [r.receiver_username for r in alice_friends.outgoing] == ["bob"]

    again = asyncio.run(alice_friends.send_request("bob"))
    assert isinstance(again.error, DuplicateRequest)

    asyncio.run(bob_friends.load_all())
    assert [r.sender_username for r in bob_friends.incoming] == ["alice"]

    accepted = asyncio.run(bob_friends.accept_request(bob_friends.incoming[0].id))
    assert accepted.value is True
    assert [f.username for f in bob_friends.friends] == ["alice"]

    asyncio.run(alice_friends.load_all())
    assert [f.username for f in alice_friends.friends] == ["bob"]
    assert alice_friends.outgoing == ()

    alice_chat = ChatSession(alice_api, BannerNotifier())
    bob_chat = ChatSession(bob_api, BannerNotifier())
    asyncio.run(alice_chat.open(alice, alice_friends.friends[0]))
    assert alice_chat.messages == ()
    assert asyncio.run(alice_chat.send_message("Hello!")).ok
    assert asyncio.run(alice_chat.send_message("   ")).error is not None

    asyncio.run(bob_chat.open(bob, bob_friends.friends[0]))
    assert asyncio.run(bob_chat.send_message("Hi there!")).ok
    assert [(m.sender_id, m.body) for m in bob_chat.messages] == [(alice.id, "Hello!"), (bob.id, "Hi there!")]

    asyncio.run(alice_chat.load_history())
    assert [m.body for m in alice_chat.messages] == ["Hello!", "Hi there!"]


def test_unknown_user_and_removed_friend(server_client):
    alice_api, alice = _sign_in(server_client, "alice")
    bob_api, bob = _sign_in(server_client, "bob")
    alice_friends = FriendGraphManager(alice_api, BannerNotifier(), alice)
    bob_friends = FriendGraphManager(bob_api, BannerNotifier(), bob)

    missing = asyncio.run(alice_friends.send_request("nobody"))
    assert isinstance(missing.error, NotFound)

    asyncio.run(alice_friends.send_request("bob"))
    asyncio.run(bob_friends.load_incoming())
    asyncio.run(bob_friends.accept_request(bob_friends.incoming[0].id))
    asyncio.run(alice_friends.load_friends())

    removed = asyncio.run(alice_friends.remove_friend(bob.id, confirm=lambda friend: True))
    assert removed.value is True
    assert alice_friends.friends == ()

    chat = ChatSession(bob_api, BannerNotifier())
    asyncio.run(chat.open(bob, bob_friends.friends[0]))
    result = asyncio.run(chat.send_message("still there?"))
    assert isinstance(result.error, ServerRejected)
    assert result.error.status_code == 403
    assert chat.draft == "still there?"


def test_decline_and_cancel(server_client):
    alice_api, alice = _sign_in(server_client, "alice")
    bob_api, bob = _sign_in(server_client, "bob")
    _, carol = _sign_in(server_client, "carol")
    alice_friends = FriendGraphManager(alice_api, BannerNotifier(), alice)
    bob_friends = FriendGraphManager(bob_api, BannerNotifier(), bob)

    asyncio.run(alice_friends.send_request("bob"))
    asyncio.run(alice_friends.send_request("carol"))
    asyncio.run(bob_friends.load_incoming())

    assert asyncio.run(bob_friends.decline_request(bob_friends.incoming[0].id)).value is True
    carol_request = next(r for r in alice_friends.outgoing if r.receiver_id == carol.id)
    assert asyncio.run(alice_friends.cancel_request(carol_request.id)).value is True

    asyncio.run(alice_friends.load_all())
    assert alice_friends.outgoing == ()
    assert alice_friends.friends == ()


def test_shared_task_appears_for_friend(server_client):
    alice_api, alice = _sign_in(server_client, "alice")
    bob_api, bob = _sign_in(server_client, "bob")
    alice_friends = FriendGraphManager(alice_api, BannerNotifier(), alice)
    bob_friends = FriendGraphManager(bob_api, BannerNotifier(), bob)
    asyncio.run(alice_friends.send_request("bob"))
    asyncio.run(bob_friends.load_incoming())
    asyncio.run(bob_friends.accept_request(bob_friends.incoming[0].id))

    alice_board = TaskBoard(alice_api, BannerNotifier(), alice)
    created = asyncio.run(alice_board.create(TaskDraft(name="Plan trip", priority="High", shared_with=[bob.id])))
    assert created.ok
    assert asyncio.run(alice_board.toggle(created.value.id)).value is True

    bob_board = TaskBoard(bob_api, BannerNotifier(), bob)
    asyncio.run(bob_board.load_all())
    assert [(t.name, t.owner_username, t.completed) for t in bob_board.shared] == [("Plan trip", "alice", True)]
    assert bob_board.personal == ()

    asyncio.run(alice_board.load_all())
    assert alice_board.stats().completed == 1

    not_friend = asyncio.run(alice_board.create(TaskDraft(name="Secret", shared_with=[999])))
    assert isinstance(not_friend.error, ServerRejected)


def test_request_to_peer_who_already_asked_is_duplicate(server_client):
    alice_api, alice = _sign_in(server_client, "alice")
    bob_api, bob = _sign_in(server_client, "bobby")
    alice_friends = FriendGraphManager(alice_api, BannerNotifier(), alice)
    bob_friends = FriendGraphManager(bob_api, BannerNotifier(), bob)
    asyncio.run(alice_friends.load_all())

    assert asyncio.run(bob_friends.send_request("alice")).ok
    result = asyncio.run(alice_friends.send_request("bobby"))

    assert isinstance(result.error, DuplicateRequest)
    assert alice_friends.incoming == ()
