"""Configuration: env, database location, API binding."""
import os
from pathlib import Path

# Base paths (project root = parent of record_tracker package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so RECORD_TRACKER_* overrides are set
from dotenv import load_dotenv

load_dotenv(BASE_DIR / ".env")

DATA_DIR = BASE_DIR / "data"
DATABASE_PATH = Path(os.getenv("RECORD_TRACKER_DB_PATH", str(DATA_DIR / "record_tracker.db")))
# Seconds a connection waits on a locked database before failing
DATABASE_TIMEOUT = float(os.getenv("RECORD_TRACKER_DB_TIMEOUT", "5.0"))

# API
API_HOST = os.getenv("RECORD_TRACKER_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("RECORD_TRACKER_API_PORT", "3000"))
# Comma-separated origins for the web frontend; "*" allows any
WEB_ORIGINS = [
    o.strip() for o in os.getenv("RECORD_TRACKER_WEB_ORIGINS", "*").split(",") if o.strip()
]

LOG_LEVEL = os.getenv("RECORD_TRACKER_LOG_LEVEL", "INFO").upper()

# Catalog
DEFAULT_COVER = "default-cover.jpg"
