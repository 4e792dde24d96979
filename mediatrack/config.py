import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mediatrack.db")

# Frontend base URL for task links in emails
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Public base URL of this API, used to build unsubscribe links
PUBLIC_API_URL = os.getenv("PUBLIC_API_URL", "http://localhost:8000")

# Unsubscribe tokens - without a secret no unsubscribe links are issued
UNSUBSCRIBE_SECRET = os.getenv("UNSUBSCRIBE_SECRET")
if not UNSUBSCRIBE_SECRET:
    import warnings

    warnings.warn(
        "UNSUBSCRIBE_SECRET not set! Conflict emails will go out without unsubscribe links",
        RuntimeWarning,
        stacklevel=2,
    )
UNSUBSCRIBE_TOKEN_TTL_DAYS = int(os.getenv("UNSUBSCRIBE_TOKEN_TTL_DAYS", "7"))

# iCal feed fetching
ICAL_FETCH_TIMEOUT = float(os.getenv("ICAL_FETCH_TIMEOUT", "15"))
CONFLICT_MAX_CONCURRENCY = int(os.getenv("CONFLICT_MAX_CONCURRENCY", "10"))

# Gap search horizon in months from today
GAP_SEARCH_MONTHS = int(os.getenv("GAP_SEARCH_MONTHS", "6"))

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Media Tracker <noreply@mediatrack.app>")
