"""Query Engine -- 任务集合的过滤、搜索与排序

所有函数都是纯函数：输入任务集合和显式的 now，不修改输入，不抛异常。
naive 的 now 视为 UTC；naive 的任务时间视为 now 所在时区的本地时间。

overdue 与 due-today 互斥：
- overdue:   due_date < now 且状态非终态
- due-today: due_date 落在 [max(now, 今日零点), 明日零点) 且状态非终态
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from .dates import aware, day_window, in_window, to_local, week_window
from .models.enums import (
    PRIORITY_RANK,
    STATUS_RANK,
    DisplayStatus,
    SortDirection,
    TaskStatus,
    is_closed,
)
from .models.filters import DateRange, TaskFilter, TaskSortOption
from .models.task import Task

TaskPredicate = Callable[[Task], bool]


def _open_due(task: Task, now: datetime) -> datetime | None:
    """未关闭任务的本地 due_date；无 due_date 或已关闭返回 None"""
    if task.due_date is None or is_closed(task.status):
        return None
    return to_local(task.due_date, now.tzinfo)


def is_overdue(task: Task, now: datetime) -> bool:
    """due_date 已过且未完成/未取消"""
    now = aware(now)
    due = _open_due(task, now)
    return due is not None and due < now


def is_due_today(task: Task, now: datetime) -> bool:
    """今天剩余时间内到期（今天已过的部分归入 overdue）"""
    now = aware(now)
    due = _open_due(task, now)
    if due is None:
        return False
    start, end = day_window(now)
    return max(start, now) <= due < end


def is_due_tomorrow(task: Task, now: datetime) -> bool:
    now = aware(now)
    if _open_due(task, now) is None:
        return False
    return in_window(task.due_date, day_window(now, offset_days=1), now.tzinfo)


def is_due_this_week(task: Task, now: datetime) -> bool:
    """本周（Sunday 起）剩余时间内到期"""
    now = aware(now)
    due = _open_due(task, now)
    if due is None:
        return False
    start, end = week_window(now)
    return max(start, now) <= due < end


def display_status(task: Task, now: datetime) -> DisplayStatus:
    """展示状态：逾期任务显示为 overdue，其余与存储状态一致"""
    if is_overdue(task, now):
        return DisplayStatus.OVERDUE
    return DisplayStatus(task.status.value)


def matches_search(task: Task, term: str) -> bool:
    """标题、描述、标签的大小写不敏感子串匹配"""
    term = term.lower()
    if term in task.title.lower():
        return True
    if task.description and term in task.description.lower():
        return True
    return any(term in tag.lower() for tag in task.tags)


def status_predicate(statuses: Iterable[TaskStatus]) -> TaskPredicate:
    """状态谓词 -- get_tasks_by_status 与 TaskFilter.statuses 共用"""
    allowed = set(statuses)
    return lambda task: task.status in allowed


def _range_predicate(
    date_range: DateRange,
    attr: str,
    now: datetime,
) -> TaskPredicate:
    tz = date_range.start.tzinfo or now.tzinfo
    start, end = to_local(date_range.start, tz), to_local(date_range.end, tz)

    def predicate(task: Task) -> bool:
        value = getattr(task, attr)
        return value is not None and start <= to_local(value, tz) <= end

    return predicate


def build_predicates(task_filter: TaskFilter, now: datetime) -> list[TaskPredicate]:
    """把 TaskFilter 中已设置的条件展开为谓词列表（AND 语义）"""
    f = task_filter
    now = aware(now)
    predicates: list[TaskPredicate] = []

    if f.statuses:
        predicates.append(status_predicate(f.statuses))
    if f.priorities:
        predicates.append(lambda t: t.priority in f.priorities)
    if f.types:
        predicates.append(lambda t: t.type in f.types)
    if f.assigned_users:
        predicates.append(lambda t: t.assigned_user_id in f.assigned_users)
    if f.tags:
        predicates.append(lambda t: not f.tags.isdisjoint(t.tags))
    if f.search_term and f.search_term.strip():
        term = f.search_term.strip()
        predicates.append(lambda t: matches_search(t, term))

    # 布尔条件：True 选中满足者，False 选中不满足者
    flags: list[tuple[bool | None, Callable[[Task, datetime], bool]]] = [
        (f.is_overdue, is_overdue),
        (f.is_due_today, is_due_today),
        (f.is_due_tomorrow, is_due_tomorrow),
        (f.is_due_this_week, is_due_this_week),
    ]
    for expected, check in flags:
        if expected is not None:
            predicates.append(
                lambda t, expected=expected, check=check: check(t, now) == expected
            )

    if f.date_range is not None:
        predicates.append(_range_predicate(f.date_range, "created_at", now))
    if f.due_date_range is not None:
        predicates.append(_range_predicate(f.due_date_range, "due_date", now))

    if f.has_attachments is not None:
        predicates.append(lambda t: bool(t.attachments) == f.has_attachments)
    if f.has_subtasks is not None:
        predicates.append(lambda t: bool(t.subtasks) == f.has_subtasks)
    if f.contact_id is not None:
        predicates.append(lambda t: t.contact_id == f.contact_id)
    if f.deal_id is not None:
        predicates.append(lambda t: t.deal_id == f.deal_id)
    if f.company_id is not None:
        predicates.append(lambda t: t.company_id == f.company_id)

    return predicates


def get_filtered_tasks(
    tasks: Iterable[Task],
    task_filter: TaskFilter | None,
    now: datetime,
) -> list[Task]:
    """按组合条件过滤，保持集合原有顺序"""
    if task_filter is None:
        return list(tasks)
    predicates = build_predicates(task_filter, now)
    return [task for task in tasks if all(p(task) for p in predicates)]


def get_tasks_by_status(tasks: Iterable[Task], status: TaskStatus) -> list[Task]:
    """看板列查询：与 TaskFilter(statuses={status}) 使用同一谓词"""
    predicate = status_predicate([status])
    return [task for task in tasks if predicate(task)]


def _sort_value(task: Task, field: str) -> Any:
    value = getattr(task, field)
    if field == "priority":
        return PRIORITY_RANK[value]
    if field == "status":
        return STATUS_RANK[value]
    if isinstance(value, datetime):
        return aware(value).timestamp()
    if isinstance(value, str):
        return value.casefold()
    if isinstance(value, (list, dict)):
        return len(value)
    if isinstance(value, BaseModel):
        # 嵌套模型不可比较，保持原顺序
        return 0
    return value


def sort_tasks(tasks: Iterable[Task], sort: TaskSortOption | None) -> list[Task]:
    """稳定排序

    字符串大小写不敏感，priority/status 按枚举 rank，日期与数值自然序；
    None 始终排在最后；相等元素保持集合原有顺序（升降序均如此）。
    未知字段按原顺序返回。
    """
    tasks = list(tasks)
    if sort is None or sort.field not in Task.model_fields:
        return tasks

    present = [t for t in tasks if getattr(t, sort.field) is not None]
    missing = [t for t in tasks if getattr(t, sort.field) is None]
    present.sort(
        key=lambda t: _sort_value(t, sort.field),
        reverse=sort.direction == SortDirection.DESC,
    )
    return present + missing

