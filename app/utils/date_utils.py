# app/utils/date_utils.py
import enum
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional


class TimeFrame(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


DAY_NAMES = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Ahad"]
MONTH_NAMES = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat those as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_days_of_week(start: date) -> List[date]:
    return [start + timedelta(days=i) for i in range(7)]


def format_day(day: date) -> str:
    # e.g. "Ahad, 7 Januari"
    return f"{DAY_NAMES[day.weekday()]}, {day.day} {MONTH_NAMES[day.month - 1]}"


def start_of_time_frame(frame: TimeFrame, now: Optional[datetime] = None) -> datetime:
    now = as_utc(now) or utcnow()
    today = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
    if frame == TimeFrame.DAILY:
        return today
    if frame == TimeFrame.WEEKLY:
        return today - timedelta(days=today.weekday())
    return today.replace(day=1)
