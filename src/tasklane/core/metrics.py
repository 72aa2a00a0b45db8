"""Metrics Engine -- 任务集合的聚合统计

基于整个集合计算（不做过滤）。逾期判断与 Query Engine 共用 query.is_overdue，
今日/本周到期与 query.is_due_today / query.is_due_this_week 共用，口径不会漂移。

productivity_score = min(100, completion_rate + tasks_completed_today * 5)
"""

from collections.abc import Iterable
from datetime import datetime

from .config import PRODUCTIVITY_PER_COMPLETION
from .dates import aware, day_window, in_window, month_window, to_local, week_window
from .models.enums import TaskPriority, TaskStatus, TaskType
from .models.metrics import TaskMetrics
from .models.task import Task
from .query import is_due_this_week, is_due_today, is_overdue

UNASSIGNED_KEY = "unassigned"

_SECONDS_PER_DAY = 24 * 60 * 60


def compute_metrics(tasks: Iterable[Task], now: datetime) -> TaskMetrics:
    """计算聚合统计

    Args:
        tasks: 任务集合
        now: 当前时间（决定本地日/周/月窗口）

    Returns:
        TaskMetrics；空集合时所有计数为 0
    """
    tasks = list(tasks)
    now = aware(now)
    tz = now.tzinfo
    today, this_week, this_month = day_window(now), week_window(now), month_window(now)

    by_type: dict[TaskType, int] = {t: 0 for t in TaskType}
    by_priority: dict[TaskPriority, int] = {p: 0 for p in TaskPriority}
    by_status: dict[TaskStatus, int] = {s: 0 for s in TaskStatus}
    by_user: dict[str, int] = {}

    overdue = 0
    completed_today = completed_week = completed_month = 0
    durations_days: list[float] = []

    for task in tasks:
        by_type[task.type] += 1
        by_priority[task.priority] += 1
        by_status[task.status] += 1
        user_key = task.assigned_user_id or UNASSIGNED_KEY
        by_user[user_key] = by_user.get(user_key, 0) + 1

        if is_overdue(task, now):
            overdue += 1

        if task.status != TaskStatus.COMPLETED or task.completed_date is None:
            continue
        if in_window(task.completed_date, today, tz):
            completed_today += 1
        if in_window(task.completed_date, this_week, tz):
            completed_week += 1
        if in_window(task.completed_date, this_month, tz):
            completed_month += 1

        elapsed = to_local(task.completed_date, tz) - to_local(task.created_at, tz)
        durations_days.append(elapsed.total_seconds() / _SECONDS_PER_DAY)

    total = len(tasks)
    completed = by_status[TaskStatus.COMPLETED]
    completion_rate = completed / total * 100 if total else 0.0
    average_completion_time = (
        sum(durations_days) / len(durations_days) if durations_days else 0.0
    )
    productivity_score = min(
        100.0,
        completion_rate + completed_today * PRODUCTIVITY_PER_COMPLETION,
    )

    return TaskMetrics(
        total_tasks=total,
        completed_tasks=completed,
        pending_tasks=by_status[TaskStatus.PENDING],
        overdue_tasks=overdue,
        tasks_completed_today=completed_today,
        tasks_completed_this_week=completed_week,
        tasks_completed_this_month=completed_month,
        # completed_date 早于 created_at 的导入数据不让均值为负
        average_completion_time=max(0.0, average_completion_time),
        completion_rate=completion_rate,
        tasks_by_type=by_type,
        tasks_by_priority=by_priority,
        tasks_by_status=by_status,
        tasks_by_user=by_user,
        productivity_score=productivity_score,
    )


def get_overdue_tasks(tasks: Iterable[Task], now: datetime) -> list[Task]:
    return [task for task in tasks if is_overdue(task, now)]


def get_tasks_due_today(tasks: Iterable[Task], now: datetime) -> list[Task]:
    return [task for task in tasks if is_due_today(task, now)]


def get_tasks_due_this_week(tasks: Iterable[Task], now: datetime) -> list[Task]:
    return [task for task in tasks if is_due_this_week(task, now)]
