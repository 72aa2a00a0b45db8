"""Store Protocol 接口定义

定义 TaskStore、TemplateStore、ActivityLog 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
持久化是外部关注点，核心只依赖这些接口。
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from ..models.activity import Activity, ActivityFilter
from ..models.calendar import Calendar, CalendarEvent
from ..models.task import Task
from ..models.template import TaskTemplate


class TaskStore(Protocol):
    """Task 存储接口"""

    def put_task(self, task: Task) -> None:
        """插入或整体替换任务（保持首次插入顺序）"""
        ...

    def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    def list_tasks(self) -> list[Task]:
        """按插入顺序返回全部任务"""
        ...

    def delete_task(self, task_id: str) -> Task | None:
        """删除任务，返回被删除的任务或 None"""
        ...


class TemplateStore(Protocol):
    """TaskTemplate 存储接口"""

    def put_template(self, template: TaskTemplate) -> None:
        ...

    def get_template(self, template_id: str) -> TaskTemplate | None:
        ...

    def list_templates(self) -> list[TaskTemplate]:
        ...

    def delete_template(self, template_id: str) -> TaskTemplate | None:
        ...


class CalendarEventStore(Protocol):
    """Calendar 与 CalendarEvent 存储接口"""

    def put_calendar(self, calendar: Calendar) -> None:
        """插入或整体替换日历"""
        ...

    def list_calendars(self) -> list[Calendar]:
        ...

    def put_event(self, event: CalendarEvent) -> None:
        ...

    def list_events(self) -> list[CalendarEvent]:
        ...


class ActivityLog(Protocol):
    """Activity 日志接口

    append-only：只允许追加，不允许更新或删除。
    """

    def append(self, activity: Activity) -> Activity:
        """追加 Activity，返回分配了 seq 的记录"""
        ...

    def get_activities_for_entity(self, entity_type: str, entity_id: str) -> list[Activity]:
        """查询指定主体的 Activity，newest first"""
        ...

    def filter(
        self,
        criteria: ActivityFilter,
        now: datetime | None = None,
    ) -> list[Activity]:
        """按组合条件过滤，newest first"""
        ...

    def all(self) -> list[Activity]:
        """按追加顺序返回全部 Activity"""
        ...

    def extend(self, activities: Iterable[Activity]) -> None:
        """批量追加（快照加载），保留原 seq 顺序"""
        ...
