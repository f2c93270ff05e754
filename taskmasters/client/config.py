"""Client configuration values."""
import os
from dataclasses import dataclass
from typing import Optional

from .storage import get_server_url

DEFAULT_SERVER_URL = "http://127.0.0.1:8000"
REQUEST_TIMEOUT_SECONDS = 10.0
BANNER_SECONDS = 3.0


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_SERVER_URL
    timeout: float = REQUEST_TIMEOUT_SECONDS
    banner_seconds: float = BANNER_SECONDS


def load_config(base_url: Optional[str] = None) -> ClientConfig:
    """Build the config from an explicit URL, the environment, then local storage."""
    url = base_url or os.getenv("TASKMASTERS_SERVER_URL") or get_server_url() or DEFAULT_SERVER_URL
    return ClientConfig(
        base_url=url.rstrip("/"),
        timeout=float(os.getenv("TASKMASTERS_TIMEOUT", REQUEST_TIMEOUT_SECONDS)),
        banner_seconds=float(os.getenv("TASKMASTERS_BANNER_SECONDS", BANNER_SECONDS)),
    )
