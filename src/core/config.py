"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(os.environ.get("FICHAJES_DB_PATH", PROJECT_ROOT / "data" / "db" / "fichajes.db"))
HOLIDAYS_PATH = Path(
    os.environ.get("HOLIDAYS_PATH", PROJECT_ROOT / "data" / "bank-holidays-2026.json")
)

# =============================================================================
# INTRATIME CONFIGURATION
# =============================================================================

INTRATIME_API_URL = os.environ.get("INTRATIME_API_URL", "https://newapi.intratime.es")
INTRATIME_ACCEPT = "application/vnd.apiintratime.v1+json"
INTRATIME_TIMEOUT_SECONDS = float(os.environ.get("INTRATIME_TIMEOUT_SECONDS", "15"))
ALL_CLOCKING_TYPES = "0,1,2,3"

# =============================================================================
# SUBMISSION CONFIGURATION
# =============================================================================

SUBMIT_DELAY_SECONDS = float(os.environ.get("SUBMIT_DELAY_SECONDS", "0.5"))
SUBMIT_JITTER_MINUTES = int(os.environ.get("SUBMIT_JITTER_MINUTES", "5"))

# =============================================================================
# SCHEDULE CONFIGURATION
# =============================================================================

DEFAULT_WEEKLY_QUOTA = float(os.environ.get("DEFAULT_WEEKLY_QUOTA", "40"))
REST_DAY_HOURS = 8.0

WEEKDAY_LABELS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

# Monday to Thursday
DEFAULT_SCHEDULE = {
    "entry_time": os.environ.get("DEFAULT_ENTRY_TIME", "09:00"),
    "pause_out_time": os.environ.get("DEFAULT_PAUSE_OUT_TIME", "14:00"),
    "pause_in_time": os.environ.get("DEFAULT_PAUSE_IN_TIME", "15:00"),
    "exit_time": os.environ.get("DEFAULT_EXIT_TIME", "18:30"),
}

# Friday is a short day without lunch
FRIDAY_SCHEDULE = {
    "entry_time": os.environ.get("FRIDAY_ENTRY_TIME", "09:00"),
    "pause_out_time": "",
    "pause_in_time": "",
    "exit_time": os.environ.get("FRIDAY_EXIT_TIME", "15:00"),
}

# =============================================================================
# API CONFIGURATION
# =============================================================================

APP_API_KEY = os.environ.get("FICHAJES_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
