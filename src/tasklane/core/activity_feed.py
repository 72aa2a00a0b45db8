"""Activity feed -- 过滤与按日分组

纯函数：不修改输入，不抛异常。
统一排序为 newest first（created_at 倒序，同一时刻按 seq 倒序）。
"""

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta, tzinfo

from .dates import aware, day_key, day_window, to_local
from .models.activity import Activity, ActivityFilter
from .models.enums import FeedRange

# 预设范围回溯天数；today 使用本地零点
_PRESET_DAYS: dict[FeedRange, int] = {
    FeedRange.WEEK: 7,
    FeedRange.MONTH: 30,
}


def newest_first_key(activity: Activity) -> tuple[datetime, int]:
    return to_local(activity.created_at, UTC), activity.seq


def sort_newest_first(activities: Iterable[Activity]) -> list[Activity]:
    return sorted(activities, key=newest_first_key, reverse=True)


def preset_cutoff(preset: FeedRange, now: datetime) -> datetime | None:
    """预设范围的起始时间；all 返回 None"""
    if preset == FeedRange.ALL:
        return None
    if preset == FeedRange.TODAY:
        return day_window(now)[0]
    return now - timedelta(days=_PRESET_DAYS[preset])


def matches(activity: Activity, criteria: ActivityFilter, now: datetime | None = None) -> bool:
    """单条 Activity 是否满足全部条件"""
    if criteria.types and activity.type not in criteria.types:
        return False
    if criteria.entity_types and activity.entity_type not in criteria.entity_types:
        return False
    if criteria.user_ids and activity.user_id not in criteria.user_ids:
        return False

    if now is not None:
        now = aware(now)
    tz = now.tzinfo if now is not None else UTC
    created = to_local(activity.created_at, tz)

    if criteria.date_range is not None:
        start, end = criteria.date_range.start, criteria.date_range.end
        if start is not None and created < to_local(start, tz):
            return False
        if end is not None and created > to_local(end, tz):
            return False

    if criteria.preset is not None and now is not None:
        cutoff = preset_cutoff(criteria.preset, now)
        if cutoff is not None and created < cutoff:
            return False

    if criteria.search_term:
        term = criteria.search_term.lower()
        haystack = (activity.title, activity.description or "", activity.user_name)
        if not any(term in text.lower() for text in haystack):
            return False

    return True


def filter_activities(
    activities: Iterable[Activity],
    criteria: ActivityFilter,
    now: datetime | None = None,
) -> list[Activity]:
    """按组合条件过滤，返回 newest first

    Args:
        activities: Activity 集合
        criteria: 过滤条件
        now: 当前时间（preset 范围需要；为 None 时忽略 preset）
    """
    return sort_newest_first(a for a in activities if matches(a, criteria, now))


def group_activities_by_day(
    activities: Iterable[Activity],
    tz: tzinfo = UTC,
) -> list[tuple[str, list[Activity]]]:
    """按本地日期分组

    Returns:
        [(yyyy-MM-dd, activities)]，日期 newest first，组内 newest first。
        结果只取决于输入集合本身，与输入顺序无关。
    """
    groups: dict[str, list[Activity]] = {}
    for activity in sort_newest_first(activities):
        groups.setdefault(day_key(activity.created_at, tz), []).append(activity)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)
