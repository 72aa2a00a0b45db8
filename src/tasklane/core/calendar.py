"""Calendar Projector -- 任务到期日与日历事件合并为统一的可展示列表

- 每个有 due_date 的 Task 投影为全天条目，携带 priority/status 用于样式
- CalendarEvent 仅当 calendar_id 在可见集合中时透传
任务条目不受日历可见性影响。纯函数，不修改输入。
"""

from collections.abc import Iterable
from datetime import datetime

from .dates import aware
from .models.calendar import CalendarEntry, CalendarEvent, CalendarResource
from .models.enums import CalendarEntryKind
from .models.task import Task


def task_entry(task: Task) -> CalendarEntry:
    """Task -> 全天条目（调用方保证 due_date 非空）"""
    return CalendarEntry(
        entry_id=task.task_id,
        title=task.title,
        start=task.due_date,
        end=task.due_date,
        all_day=True,
        resource=CalendarResource(
            kind=CalendarEntryKind.TASK,
            source_id=task.task_id,
            priority=task.priority,
            status=task.status,
        ),
    )


def event_entry(event: CalendarEvent) -> CalendarEntry:
    return CalendarEntry(
        entry_id=event.event_id,
        title=event.title,
        start=event.start_date,
        end=event.end_date,
        all_day=event.is_all_day,
        resource=CalendarResource(
            kind=CalendarEntryKind.CALENDAR_EVENT,
            source_id=event.event_id,
            calendar_id=event.calendar_id,
        ),
    )


def project_calendar(
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    visible_calendar_ids: Iterable[str],
) -> list[CalendarEntry]:
    """生成日历条目：先任务条目，后可见日历事件条目

    Args:
        tasks: 任务集合
        events: 日历事件集合
        visible_calendar_ids: 可见日历 ID（空集合时不输出任何事件条目）
    """
    visible = set(visible_calendar_ids)
    entries = [task_entry(task) for task in tasks if task.due_date is not None]
    entries.extend(event_entry(event) for event in events if event.calendar_id in visible)
    return entries


def entries_in_range(
    entries: Iterable[CalendarEntry],
    start: datetime,
    end: datetime,
) -> list[CalendarEntry]:
    """与 [start, end) 有交集的条目（月/周视图）"""
    start, end = aware(start), aware(end)
    return [
        entry
        for entry in entries
        if aware(entry.start) < end and aware(entry.end) >= start
    ]
