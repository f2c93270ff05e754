import os
import tempfile
from pathlib import Path

# must run before any taskmasters module is imported: engine and log dir are read at import time
_TMP = Path(tempfile.mkdtemp(prefix="taskmasters-tests-"))
os.environ.setdefault("TASKMASTERS_DATABASE_URL", f"sqlite:///{_TMP / 'test.db'}")
os.environ.setdefault("TASKMASTERS_LOG_DIR", str(_TMP / "logs"))
os.environ.setdefault("TASKMASTERS_STATE_FILE", str(_TMP / "client.json"))

import pytest  # noqa: E402

from taskmasters.client.notify import BannerNotifier  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_state_file():
    state = Path(os.environ["TASKMASTERS_STATE_FILE"])
    state.unlink(missing_ok=True)
    yield
    state.unlink(missing_ok=True)


@pytest.fixture
def notifier():
    return BannerNotifier(duration=3.0)


@pytest.fixture
def banners(notifier):
    seen = []
    notifier.subscribe(seen.append)
    return seen


@pytest.fixture
def server_client():
    from fastapi.testclient import TestClient

    from taskmasters.server.database import Base, engine
    from taskmasters.server.main import app

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as client:
        yield client
