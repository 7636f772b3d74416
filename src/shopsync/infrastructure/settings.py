import os
from pathlib import Path

from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parents[3]

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")


def _flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


# --- Local store ---
DATA_DIR = BASE_DIR / os.getenv("SHOPSYNC_DATA_DIR", "data")

# --- Remote spreadsheet ---
SPREADSHEET_ID = os.getenv("SHOPSYNC_SPREADSHEET_ID", "")
ACCESS_TOKEN = os.getenv("SHOPSYNC_ACCESS_TOKEN", "")
REQUEST_TIMEOUT = float(os.getenv("SHOPSYNC_REQUEST_TIMEOUT", "15"))

# --- Connectivity ---
# Leave PROBE_URL empty to skip probing; the monitor then defaults to online.
PROBE_URL = os.getenv("SHOPSYNC_PROBE_URL", "")
PROBE_INTERVAL = float(os.getenv("SHOPSYNC_PROBE_INTERVAL", "15"))
FORCE_OFFLINE = _flag("SHOPSYNC_OFFLINE")

# --- Logging ---
LOG_LEVEL = os.getenv("SHOPSYNC_LOG_LEVEL", "INFO").upper()
LOG_DIR = BASE_DIR / os.getenv("SHOPSYNC_LOG_DIR", "logs")
