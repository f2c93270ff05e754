"""FastAPI application entrypoint for the TaskMasters server."""
import uvicorn
from fastapi import FastAPI

from ..shared.logging_config import configure_logging
from . import auth, friend_requests, friends, messages, tasks, users
from .config import LOG_FILE
from .database import Base, engine

logger = configure_logging(__name__, LOG_FILE)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="TaskMasters Server", version="1.0.0")
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(friends.router)
app.include_router(friend_requests.router)
app.include_router(messages.router)
app.include_router(tasks.router)


@app.get("/")
def root():
    return {"status": "ok"}


def main() -> None:
    uvicorn.run("taskmasters.server.main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
