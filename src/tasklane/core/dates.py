"""时间窗口与时钟

所有日/周/月窗口都是本地时区下的半开区间 [start, end)，周从 Sunday 开始。
naive datetime 视为本地时区时间。
"""

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Protocol


class Clock(Protocol):
    """时钟接口 -- 注入以便测试固定时间"""

    def now(self) -> datetime:
        ...


class SystemClock:
    """系统时钟，返回指定时区的当前时间"""

    def __init__(self, tz: tzinfo = UTC) -> None:
        self._tz = tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """固定时钟，可手动推进"""

    def __init__(self, current: datetime) -> None:
        self._current = current

    def now(self) -> datetime:
        return self._current

    def advance(self, delta: timedelta) -> None:
        self._current = self._current + delta

    def set(self, current: datetime) -> None:
        self._current = current


def to_local(value: datetime, tz: tzinfo) -> datetime:
    """转换到本地时区；naive 值直接附加时区"""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def _tz_of(now: datetime) -> tzinfo:
    return now.tzinfo or UTC


def _midnight(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time(), tzinfo=tz)


def day_window(now: datetime, offset_days: int = 0) -> tuple[datetime, datetime]:
    """now 所在本地日（可偏移）的 [00:00, 次日 00:00)"""
    tz = _tz_of(now)
    day = to_local(now, tz).date() + timedelta(days=offset_days)
    return _midnight(day, tz), _midnight(day + timedelta(days=1), tz)


def week_window(now: datetime) -> tuple[datetime, datetime]:
    """now 所在本地周的 [Sunday 00:00, 下周 Sunday 00:00)"""
    tz = _tz_of(now)
    today = to_local(now, tz).date()
    # date.weekday(): Monday == 0 ... Sunday == 6
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return _midnight(start, tz), _midnight(start + timedelta(days=7), tz)


def month_window(now: datetime) -> tuple[datetime, datetime]:
    """now 所在本地月的 [1 日 00:00, 次月 1 日 00:00)"""
    tz = _tz_of(now)
    today = to_local(now, tz).date()
    start = today.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return _midnight(start, tz), _midnight(end, tz)


def in_window(value: datetime | None, window: tuple[datetime, datetime], tz: tzinfo) -> bool:
    if value is None:
        return False
    start, end = window
    return start <= to_local(value, tz) < end


def day_key(value: datetime, tz: tzinfo) -> str:
    """本地日期键 yyyy-MM-dd"""
    return to_local(value, tz).strftime("%Y-%m-%d")


def aware(value: datetime) -> datetime:
    """naive 值视为 UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def comparable(a: datetime, b: datetime) -> tuple[datetime, datetime]:
    """使两个时间可比较：一方 naive 时视为另一方时区的本地时间"""
    if (a.tzinfo is None) == (b.tzinfo is None):
        return a, b
    if a.tzinfo is None:
        return a.replace(tzinfo=b.tzinfo), b
    return a, b.replace(tzinfo=a.tzinfo)
