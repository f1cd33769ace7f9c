"""
Environment-driven settings for the dashboard backend.

Values come from the process environment, with a `.env` file at the project
root loaded first. Missing Airtable credentials switch the record source to
built-in mock data instead of failing.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[1]
load_dotenv(BASE_DIR / ".env")

# Airtable table names
BOOKING_CAPACITY_TABLE = "Booking Capacity Overview"
COVER_TRACKER_TABLE = "Cover Tracking"
FINANCIAL_OVERVIEW_TABLE = "Financial Overview"
STAFF_SCHEDULING_TABLE = "Staff Scheduling"
STOCK_INSIGHT_TABLE = "Stock Insights"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class Config:
    AIRTABLE_PERSONAL_ACCESS_TOKEN = os.getenv("AIRTABLE_PERSONAL_ACCESS_TOKEN", "").strip()
    AIRTABLE_BASE_ID = os.getenv("AIRTABLE_BASE_ID", "").strip()
    AIRTABLE_API_URL = os.getenv("AIRTABLE_API_URL", "https://api.airtable.com/v0").rstrip("/")
    AIRTABLE_TIMEOUT = _int_env("AIRTABLE_TIMEOUT", 15)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.getenv("LOG_FILE", "").strip()

    SESSION_TTL_HOURS = _int_env("SESSION_TTL_HOURS", 12)
    DEFAULT_USER_PASSWORD = os.getenv("DEFAULT_USER_PASSWORD", "password123")

    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "").strip()

    # Empty means shift hours are read as written in the timestamp
    DASHBOARD_TIMEZONE = os.getenv("DASHBOARD_TIMEZONE", "").strip()

    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")
        if o.strip()
    ]

    @property
    def DATABASE_URL(self) -> str:
        url = os.getenv("DATABASE_URL", "").strip()
        if not url:
            return f"sqlite:///{BASE_DIR / 'dashboard.db'}"
        # Supabase/Heroku sometimes return postgres://; SQLAlchemy requires postgresql://
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

    @property
    def use_mock_data(self) -> bool:
        """Serve mock records when Airtable credentials are not configured."""
        return not (self.AIRTABLE_PERSONAL_ACCESS_TOKEN and self.AIRTABLE_BASE_ID)

    def __repr__(self):
        return f"<Config base={self.AIRTABLE_BASE_ID or 'mock'} db={self.DATABASE_URL}>"


# Singleton
config = Config()
