from datetime import date, datetime, timedelta
from typing import Callable

import pytz

UTC = pytz.utc

Clock = Callable[[], datetime]


def system_clock(tz=UTC) -> Clock:
    """Часы в заданной временной зоне (для тестов подменяются)"""
    def now() -> datetime:
        return datetime.now(tz)
    return now


def today_str(now: datetime) -> str:
    return now.strftime("%Y-%m-%d")


def days_before(day: str, days: int) -> str:
    """ISO-дата на days дней раньше day"""
    return (parse_date(day) - timedelta(days=days)).strftime("%Y-%m-%d")


def parse_date(date_str: str, fmt: str = "%Y-%m-%d") -> date:
    return datetime.strptime(date_str, fmt).date()


def epoch_seconds(now: datetime) -> int:
    return int(now.timestamp())
