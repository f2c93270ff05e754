"""Client error taxonomy and the result value returned by async operations."""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class ClientError(Exception):
    """Base class for every failure surfaced by the client core."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message or self.__class__.__name__


class NetworkFailure(ClientError):
    """The request did not complete (timeout, DNS, connection reset)."""


class ServerRejected(ClientError):
    """The server answered with a non-2xx status or an unusable body."""

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ValidationFailure(ClientError):
    """A client-side precondition was not met; no request was issued."""


class NotFound(ClientError):
    """A search or lookup yielded nothing."""


class DuplicateRequest(ClientError):
    """A friend request is already pending or the users are already friends."""


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ClientError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ClientError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


async def attempt(call: Callable[..., Awaitable[Result]], *args: Any) -> Result:
    """Await a gateway call, turning a raised ClientError into a failed Result."""
    try:
        return await call(*args)
    except ClientError as exc:
        return Result.failure(exc)


__all__ = [
    "ClientError",
    "DuplicateRequest",
    "NetworkFailure",
    "NotFound",
    "Result",
    "ServerRejected",
    "ValidationFailure",
    "attempt",
]
