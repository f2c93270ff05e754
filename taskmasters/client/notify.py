"""Transient banner notifications shown after user actions."""
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..shared.logging_config import configure_logging

logger = configure_logging(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Banner:
    text: str
    kind: str = SUCCESS
    expires_at: float = 0.0


class BannerNotifier:
    """Holds the single current banner; a newer banner replaces the older one.

    Listeners are called with every new banner so a view can redraw and arm its
    own timer to hide it after ``duration`` seconds.
    """

    def __init__(self, duration: float = 3.0, clock: Callable[[], float] = time.monotonic):
        self.duration = duration
        self._clock = clock
        self._banner: Optional[Banner] = None
        self._listeners: List[Callable[[Banner], None]] = []

    def subscribe(self, listener: Callable[[Banner], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[Banner], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self, text: str, kind: str = SUCCESS) -> Banner:
        banner = Banner(text=text, kind=kind, expires_at=self._clock() + self.duration)
        self._banner = banner
        log = logger.warning if kind == ERROR else logger.info
        log("BANNER kind=%s text=%s", kind, text)
        for listener in list(self._listeners):
            listener(banner)
        return banner

    def success(self, text: str) -> Banner:
        return self.notify(text, SUCCESS)

    def error(self, text: str) -> Banner:
        return self.notify(text, ERROR)

    @property
    def current(self) -> Optional[Banner]:
        if self._banner is not None and self._clock() >= self._banner.expires_at:
            self._banner = None
        return self._banner

    def clear(self) -> None:
        self._banner = None
