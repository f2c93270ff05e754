"""Server configuration values."""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
DATABASE_URL = os.getenv("TASKMASTERS_DATABASE_URL") or f"sqlite:///{BASE_DIR / 'taskmasters.db'}"
MAX_FAILED_LOGINS = 5
LOCKOUT_MINUTES = 10
SEARCH_LIMIT = 20
LOG_FILE = "server.log"
