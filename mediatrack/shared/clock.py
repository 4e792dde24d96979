"""Injectable "now" so day views, gap search and conflict checks run against fixed times in tests"""

from datetime import datetime


def get_now() -> datetime:
    """Current local time on the same naive timeline the iCal parser produces"""
    return datetime.now()
