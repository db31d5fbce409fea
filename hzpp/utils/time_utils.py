from datetime import datetime, timedelta, date, time
from typing import Optional
from zoneinfo import ZoneInfo

from hzpp.config import Config
from hzpp.utils.exceptions import ParseException


def get_now(timezone: str = None) -> datetime:
    """Naive local time of the operator's timezone"""
    return datetime.now(tz=ZoneInfo(timezone or Config.TIMEZONE)).replace(tzinfo=None)


def split_time(time_str: str) -> Optional[tuple]:
    if not time_str:
        return None
    parts = time_str.strip().split(':')
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return hours, minutes


def to_date(base) -> date:
    return base.date() if isinstance(base, datetime) else base


def create_date(base_date: date, time_str: str) -> datetime:
    """Mandatory variant, a malformed time is a hard failure"""
    parsed = split_time(time_str)
    if not parsed:
        raise ParseException(f'Failed to parse time string: {time_str!r}')
    return datetime.combine(to_date(base_date), time(*parsed))


def create_date_with_time(base_date, time_str: Optional[str], previous: Optional[datetime] = None) -> Optional[datetime]:
    """
    Absolute timestamp for a bare HH:mm printed in a table row.
    :param base_date: reference calendar date, a datetime contributes only its date
    :param time_str: "HH:mm", missing or malformed gives None
    :param previous: timestamp of the previous event, rolls the result past midnight when needed
    """
    parsed = split_time(time_str)
    if not parsed:
        return None
    _date = datetime.combine(to_date(base_date), time(*parsed))

    if previous:
        if _date < previous:
            _date += timedelta(days=1)
        # still behind the anchor by less than a day, the reference date lags one day
        hours_diff = (_date - previous).total_seconds() / 3600
        if -23 < hours_diff < 0:
            _date += timedelta(days=1)
    return _date


def time_string_to_minutes(time_str: str) -> int:
    parsed = time_str.split(':') if time_str else []
    if len(parsed) < 2:
        return 0
    try:
        return int(parsed[0]) * 60 + int(parsed[1])
    except ValueError:
        return 0


def format_minutes_to_time(minutes: int) -> str:
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def calculate_duration(start: str, end: str) -> Optional[str]:
    """HH:mm between two clock times, crossing midnight at most once"""
    if not split_time(start) or not split_time(end):
        return None
    start_minutes = time_string_to_minutes(start)
    end_minutes = time_string_to_minutes(end)
    if end_minutes < start_minutes:
        end_minutes += 24 * 60
    return format_minutes_to_time(end_minutes - start_minutes)


def parse_live_timestamp(text: str) -> Optional[datetime]:
    """`dd.mm.yy HH:mm` as printed on the live tracking page"""
    try:
        return datetime.strptime(text, '%d.%m.%y %H:%M')
    except (TypeError, ValueError):
        return None
