"""
"Today" for the dialer, in the team's configured timezone.

Queue days, sessions and streaks all key off this date, so every caller
goes through today_local() rather than date.today().
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.config import settings


def today_local() -> date:
    return datetime.now(ZoneInfo(settings.DIALER_TIMEZONE)).date()
