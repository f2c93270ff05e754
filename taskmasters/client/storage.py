"""Local client state: the server URL plus the signed-in user and their token.

Everything lives in one JSON file so that a restart can resume the session.
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ..shared.logging_config import configure_logging

logger = configure_logging(__name__)

AUTH_KEYS = ("token", "user")


def storage_file() -> Path:
    return Path(os.getenv("TASKMASTERS_STATE_FILE") or Path.home() / ".taskmasters" / "client.json")


def load_state() -> Dict[str, Any]:
    path = storage_file()
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            state = json.load(f)
    except json.JSONDecodeError:
        logger.warning("STATE_FILE_CORRUPT path=%s", path)
        return {}
    return state if isinstance(state, dict) else {}


def save_state(data: Dict[str, Any]) -> None:
    path = storage_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _update(**values: Any) -> None:
    state = load_state()
    for key, value in values.items():
        if value is None:
            state.pop(key, None)
        else:
            state[key] = value
    save_state(state)


def store_auth(token: str, user: Dict[str, Any]) -> None:
    _update(token=token, user=user)


def clear_auth() -> None:
    """Forget the session; the server URL survives a logout."""
    _update(**{key: None for key in AUTH_KEYS})


def get_token() -> Optional[str]:
    return load_state().get("token")


def get_user() -> Optional[Dict[str, Any]]:
    return load_state().get("user")


def store_server_url(url: str) -> None:
    _update(server_url=url)


def get_server_url() -> Optional[str]:
    return load_state().get("server_url")
