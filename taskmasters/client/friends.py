"""Client-side view of the friend graph: confirmed friends plus pending requests.

The three collections are only replaced after an operation completes. Every
replacement goes through ``_reconcile`` so that a peer shown as a friend never
also shows up as a pending request, and a request id never sits in both the
incoming and the outgoing list.
"""
import asyncio
from typing import Awaitable, Callable, Dict, Iterable, Optional, Set, Tuple

from ..shared.logging_config import configure_logging
from ..shared.utils import is_blank, normalize_username, utcnow
from .errors import ClientError, DuplicateRequest, NotFound, Result, ServerRejected, ValidationFailure, attempt
from .models import Friend, FriendRequest, User

logger = configure_logging(__name__)

FRIENDS = "friends"
INCOMING = "incoming"
OUTGOING = "outgoing"


class FriendGraphManager:
    def __init__(self, gateway, notifier, user: User):
        self.gateway = gateway
        self.notifier = notifier
        self.user = user
        self._friends: Tuple[Friend, ...] = ()
        self._incoming: Tuple[FriendRequest, ...] = ()
        self._outgoing: Tuple[FriendRequest, ...] = ()
        self.loading: Dict[str, bool] = {FRIENDS: False, INCOMING: False, OUTGOING: False}
        self._in_flight: Set[int] = set()
        self._removing: Set[int] = set()
        self._sending: Set[str] = set()
        self._alive = True

    @property
    def friends(self) -> Tuple[Friend, ...]:
        return self._friends

    @property
    def incoming(self) -> Tuple[FriendRequest, ...]:
        return self._incoming

    @property
    def outgoing(self) -> Tuple[FriendRequest, ...]:
        return self._outgoing

    @property
    def alive(self) -> bool:
        return self._alive

    def dispose(self) -> None:
        """Stop applying responses; anything still in flight is dropped on arrival."""
        self._alive = False

    def friend(self, friend_id: int) -> Optional[Friend]:
        return next((f for f in self._friends if f.id == friend_id), None)

    def is_connected(self, peer_id: int) -> bool:
        """True when the peer is a friend or has a pending request either way."""
        if self.friend(peer_id) is not None:
            return True
        requests = self._incoming + self._outgoing
        return any(r.peer_id(self.user.id) == peer_id for r in requests)

    # loading

    async def load_all(self) -> Dict[str, Result]:
        friends, incoming, outgoing = await asyncio.gather(
            self.load_friends(), self.load_incoming(), self.load_outgoing()
        )
        return {FRIENDS: friends, INCOMING: incoming, OUTGOING: outgoing}

    async def load_friends(self) -> Result:
        return await self._load(FRIENDS, self.gateway.get_friends, "Failed to load friends")

    async def load_incoming(self) -> Result:
        return await self._load(INCOMING, self.gateway.get_incoming_requests, "Failed to load friend requests")

    async def load_outgoing(self) -> Result:
        return await self._load(OUTGOING, self.gateway.get_outgoing_requests, "Failed to load sent requests")

    async def _load(self, name: str, fetch: Callable[[int], Awaitable[Result]], failure_text: str) -> Result:
        self.loading[name] = True
        try:
            result = await attempt(fetch, self.user.id)
        finally:
            self.loading[name] = False
        if not self._alive:
            logger.info("LATE_RESPONSE_DROPPED collection=%s user_id=%s", name, self.user.id)
            return result
        if not result.ok:
            self.notifier.error(f"{failure_text}: {result.error}")
            return result
        if name == FRIENDS:
            self._friends = self._ordered(result.value)
        elif name == INCOMING:
            self._incoming = tuple(result.value)
        else:
            self._outgoing = tuple(result.value)
        self._reconcile()
        return result

    # mutations

    async def send_request(self, target_username: str) -> Result:
        if is_blank(target_username):
            return self._reject(ValidationFailure("Please enter a username"))
        term = target_username.strip()
        key = normalize_username(term)
        if key == normalize_username(self.user.username):
            return self._reject(ValidationFailure("You cannot send a friend request to yourself"))
        if key in self._sending:
            return self._reject(DuplicateRequest(f"A request to {term} is already being sent"))

        self._sending.add(key)
        try:
            search = await attempt(self.gateway.search_users, term)
            if not self._alive:
                return Result.success(None)
            if not search.ok:
                return self._reject(search.error, "Search failed")
            match = next((u for u in search.value if normalize_username(u.username) == key), None)
            if match is None:
                return self._reject(NotFound(f"No user named {term}"))
            if match.id == self.user.id:
                return self._reject(ValidationFailure("You cannot send a friend request to yourself"))
            if self.is_connected(match.id):
                return self._reject(DuplicateRequest(f"You are already connected with {match.username}"))

            created = await attempt(self.gateway.send_friend_request, self.user.id, match.id)
        finally:
            self._sending.discard(key)

        if not self._alive:
            return Result.success(None)
        if not created.ok:
            error = created.error
            # 409: pending or already friends, but our local lists were stale
            if isinstance(error, ServerRejected) and error.status_code == 409:
                error = DuplicateRequest(error.message)
            return self._reject(error, "Could not send friend request")
        logger.info("FRIEND_REQUEST_SENT requester=%s receiver=%s", self.user.id, match.id)
        self.notifier.success(f"Friend request sent to {match.username}")
        await self.load_outgoing()
        return created

    async def accept_request(self, request_id: int) -> Result:
        request = self._find(self._incoming, request_id)
        if request is None or request_id in self._in_flight:
            return Result.success(False)

        self._in_flight.add(request_id)
        try:
            result = await attempt(self.gateway.accept_request, request_id)
        finally:
            self._in_flight.discard(request_id)
        if not self._alive:
            return Result.success(False)
        if not result.ok:
            return self._reject(result.error, "Could not accept request")

        friend = result.value or Friend(
            id=request.sender_id, username=request.sender_username, friends_since=utcnow()
        )
        self._incoming = tuple(r for r in self._incoming if r.id != request_id)
        self._friends = self._ordered([f for f in self._friends if f.id != friend.id] + [friend])
        self._reconcile()
        logger.info("FRIEND_REQUEST_ACCEPTED request_id=%s user_id=%s", request_id, self.user.id)
        self.notifier.success(f"You are now friends with {friend.username or request.sender_username}")
        return Result.success(True)

    async def decline_request(self, request_id: int) -> Result:
        request = self._find(self._incoming, request_id)
        if request is None or request_id in self._in_flight:
            return Result.success(False)

        self._in_flight.add(request_id)
        try:
            result = await attempt(self.gateway.decline_request, request_id)
        finally:
            self._in_flight.discard(request_id)
        if not self._alive:
            return Result.success(False)
        if not result.ok:
            return self._reject(result.error, "Could not decline request")

        self._incoming = tuple(r for r in self._incoming if r.id != request_id)
        logger.info("FRIEND_REQUEST_DECLINED request_id=%s user_id=%s", request_id, self.user.id)
        self.notifier.success(f"Declined request from {request.sender_username}")
        return Result.success(True)

    async def cancel_request(self, request_id: int) -> Result:
        request = self._find(self._outgoing, request_id)
        if request is None or request_id in self._in_flight:
            return Result.success(False)

        self._in_flight.add(request_id)
        try:
            result = await attempt(self.gateway.cancel_request, request_id)
        finally:
            self._in_flight.discard(request_id)
        if not self._alive:
            return Result.success(False)
        if not result.ok:
            return self._reject(result.error, "Could not cancel request")

        self._outgoing = tuple(r for r in self._outgoing if r.id != request_id)
        logger.info("FRIEND_REQUEST_CANCELLED request_id=%s user_id=%s", request_id, self.user.id)
        self.notifier.success(f"Cancelled request to {request.receiver_username}")
        return Result.success(True)

    async def remove_friend(self, friend_id: int, confirm: Optional[Callable[[Friend], bool]] = None) -> Result:
        friend = self.friend(friend_id)
        if friend is None or friend_id in self._removing:
            return Result.success(False)
        if confirm is not None and not confirm(friend):
            return Result.success(False)

        self._removing.add(friend_id)
        try:
            result = await attempt(self.gateway.remove_friend, self.user.id, friend_id)
        finally:
            self._removing.discard(friend_id)
        if not self._alive:
            return Result.success(False)
        if not result.ok:
            return self._reject(result.error, "Could not remove friend")

        self._friends = tuple(f for f in self._friends if f.id != friend_id)
        logger.info("FRIEND_REMOVED user_id=%s friend_id=%s", self.user.id, friend_id)
        self.notifier.success(f"Removed {friend.username} from your friends")
        return Result.success(True)

    # helpers

    def _reject(self, error: ClientError, prefix: str = "") -> Result:
        self.notifier.error(f"{prefix}: {error}" if prefix else str(error))
        return Result.failure(error)

    @staticmethod
    def _find(requests: Iterable[FriendRequest], request_id: int) -> Optional[FriendRequest]:
        return next((r for r in requests if r.id == request_id), None)

    @staticmethod
    def _ordered(friends: Iterable[Friend]) -> Tuple[Friend, ...]:
        return tuple(sorted(friends, key=Friend.sort_key))

    def _reconcile(self) -> None:
        friend_ids = {f.id for f in self._friends}
        uid = self.user.id
        self._incoming = tuple(r for r in self._incoming if r.peer_id(uid) not in friend_ids)
        incoming_ids = {r.id for r in self._incoming}
        self._outgoing = tuple(
            r for r in self._outgoing if r.peer_id(uid) not in friend_ids and r.id not in incoming_ids
        )
