"""TaskEngine -- 引擎门面

持有 StoreGroup、TaskService、EngineConfig 与 Clock，组合写入与只读查询。
不存在模块级单例：每个 TaskEngine 实例拥有独立的数据。

查询类方法的 now 默认取时钟当前时间，并转换到配置时区，
因此日/周/月窗口按 TASKLANE_TIMEZONE 的本地时间计算。
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError
from ulid import ULID

from . import calendar as calendar_projector
from . import metrics as metrics_engine
from . import query
from .activity_feed import group_activities_by_day
from .config import EngineConfig, load_engine_config
from .dates import Clock, SystemClock, aware, to_local
from .dependencies import DependencyGraph
from .exceptions import TaskNotFoundError, TaskValidationError
from .models.activity import Activity, ActivityFilter
from .models.calendar import Calendar, CalendarEntry, CalendarEvent
from .models.enums import EntityType, FeedRange, TaskStatus
from .models.filters import TaskFilter, TaskSortOption
from .models.metrics import TaskMetrics
from .models.task import Task
from .models.template import TaskTemplate
from .services.task_service import TaskService
from .store import StoreGroup, create_store_group

log = structlog.get_logger()

_tasks_adapter = TypeAdapter(list[Task])
_templates_adapter = TypeAdapter(list[TaskTemplate])
_calendars_adapter = TypeAdapter(list[Calendar])
_activities_adapter = TypeAdapter(list[Activity])
_events_adapter = TypeAdapter(list[CalendarEvent])


class TaskEngine:
    """任务引擎门面"""

    def __init__(
        self,
        store_group: StoreGroup,
        config: EngineConfig,
        clock: Clock,
    ) -> None:
        self.stores = store_group
        self.config = config
        self.clock = clock
        self.service = TaskService(store_group, config, clock)

    # Mutation API 与模板管理直接委托给 TaskService
    def __getattr__(self, name: str) -> Any:
        if name in _SERVICE_METHODS:
            return getattr(self.service, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def now(self) -> datetime:
        """配置时区下的当前时间"""
        return to_local(aware(self.clock.now()), self.config.tzinfo)

    # ------------------------------------------------------------------
    # Task 查询
    # ------------------------------------------------------------------

    def get_task(self, task_id: str) -> Task:
        return self.service.get_task(task_id)

    def list_tasks(self) -> list[Task]:
        return self.stores.task_store.list_tasks()

    def get_filtered_tasks(
        self,
        task_filter: TaskFilter | None = None,
        sort: TaskSortOption | None = None,
        now: datetime | None = None,
    ) -> list[Task]:
        """过滤并（可选）排序"""
        tasks = query.get_filtered_tasks(self.list_tasks(), task_filter, now or self.now())
        return query.sort_tasks(tasks, sort)

    def sort_tasks(self, tasks: Iterable[Task], sort: TaskSortOption | None) -> list[Task]:
        return query.sort_tasks(tasks, sort)

    def get_tasks_by_status(self, status: TaskStatus | str) -> list[Task]:
        return query.get_tasks_by_status(self.list_tasks(), TaskStatus(status))

    def display_status(self, task_id: str, now: datetime | None = None) -> str:
        return query.display_status(self.get_task(task_id), now or self.now()).value

    def compute_metrics(self, now: datetime | None = None) -> TaskMetrics:
        return metrics_engine.compute_metrics(self.list_tasks(), now or self.now())

    def get_overdue_tasks(self, now: datetime | None = None) -> list[Task]:
        return metrics_engine.get_overdue_tasks(self.list_tasks(), now or self.now())

    def get_tasks_due_today(self, now: datetime | None = None) -> list[Task]:
        return metrics_engine.get_tasks_due_today(self.list_tasks(), now or self.now())

    def get_tasks_due_this_week(self, now: datetime | None = None) -> list[Task]:
        return metrics_engine.get_tasks_due_this_week(self.list_tasks(), now or self.now())

    def dependency_graph(self) -> DependencyGraph:
        return DependencyGraph.from_tasks(self.list_tasks())

    def can_start(self, task_id: str) -> bool:
        """所有已知前置任务是否都已完成"""
        if self.stores.task_store.get_task(task_id) is None:
            raise TaskNotFoundError(task_id)
        return self.dependency_graph().can_start(task_id)

    # ------------------------------------------------------------------
    # Activity 查询
    # ------------------------------------------------------------------

    def get_activities_for_entity(
        self,
        entity_type: EntityType | str,
        entity_id: str,
    ) -> list[Activity]:
        return self.stores.activity_log.get_activities_for_entity(entity_type, entity_id)

    def filter_activities(
        self,
        criteria: ActivityFilter | None = None,
        now: datetime | None = None,
    ) -> list[Activity]:
        """组合过滤 Activity

        未传入 criteria 时使用配置中的默认时间范围（activity_feed_default_range）。
        """
        if criteria is None:
            criteria = ActivityFilter(preset=self.config.activity_feed_default_range)
        return self.stores.activity_log.filter(criteria, now or self.now())

    def group_activities(
        self,
        activities: Iterable[Activity] | None = None,
    ) -> list[tuple[str, list[Activity]]]:
        """按配置时区的本地日期分组；未传入时分组全部 Activity"""
        if activities is None:
            activities = self.stores.activity_log.all()
        return group_activities_by_day(activities, self.config.tzinfo)

    def recent_activities(self, preset: FeedRange | None = None) -> list[Activity]:
        return self.filter_activities(
            ActivityFilter(preset=preset or self.config.activity_feed_default_range)
        )

    # ------------------------------------------------------------------
    # Calendar
    # ------------------------------------------------------------------

    def add_calendar(self, data: Calendar | Mapping[str, Any]) -> Calendar:
        """登记日历（同 calendar_id 覆盖）"""
        try:
            calendar = data if isinstance(data, Calendar) else Calendar.model_validate(data)
        except ValidationError as e:
            raise TaskValidationError(
                f"invalid calendar: {e.error_count()} error(s)",
                errors=e.errors(include_url=False),
            ) from e
        self.stores.calendar_store.put_calendar(calendar)
        log.info("calendar_added", calendar_id=calendar.calendar_id)
        return calendar

    def list_calendars(self) -> list[Calendar]:
        return self.stores.calendar_store.list_calendars()

    def visible_calendar_ids(self) -> set[str]:
        return {c.calendar_id for c in self.list_calendars() if c.is_visible}

    def add_calendar_event(self, data: CalendarEvent | Mapping[str, Any]) -> CalendarEvent:
        """登记日历事件；未提供 event_id / 时间戳时自动生成"""
        if isinstance(data, CalendarEvent):
            event = data
        else:
            now = self.clock.now()
            fields = {"event_id": str(ULID()), "created_at": now, "updated_at": now, **data}
            try:
                event = CalendarEvent.model_validate(fields)
            except ValidationError as e:
                raise TaskValidationError(
                    f"invalid calendar event: {e.error_count()} error(s)",
                    errors=e.errors(include_url=False),
                ) from e
        self.stores.calendar_store.put_event(event)
        log.info("calendar_event_added", event_id=event.event_id, calendar_id=event.calendar_id)
        return event

    def list_calendar_events(self) -> list[CalendarEvent]:
        return self.stores.calendar_store.list_events()

    def project_calendar(
        self,
        visible_calendar_ids: Iterable[str] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[CalendarEntry]:
        """日历投影；给定 start/end 时只返回与 [start, end) 相交的条目

        visible_calendar_ids 为 None 时使用已登记且 is_visible 的日历。
        """
        if visible_calendar_ids is None:
            visible_calendar_ids = self.visible_calendar_ids()
        entries = calendar_projector.project_calendar(
            self.list_tasks(),
            self.list_calendar_events(),
            visible_calendar_ids,
        )
        if start is not None and end is not None:
            entries = calendar_projector.entries_in_range(entries, start, end)
        return entries

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def export_snapshot(self) -> dict[str, list[dict[str, Any]]]:
        """导出 JSON 兼容快照"""
        return {
            "tasks": _tasks_adapter.dump_python(self.list_tasks(), mode="json"),
            "templates": _templates_adapter.dump_python(
                self.stores.template_store.list_templates(),
                mode="json",
            ),
            "activities": _activities_adapter.dump_python(
                self.stores.activity_log.all(),
                mode="json",
            ),
            "calendars": _calendars_adapter.dump_python(self.list_calendars(), mode="json"),
            "calendar_events": _events_adapter.dump_python(
                self.list_calendar_events(),
                mode="json",
            ),
        }

    def load_snapshot(self, data: Mapping[str, Any]) -> None:
        """导入快照（追加到当前数据；同 ID 的 Task / 模板 / 日历 / 事件被替换）

        Raises:
            TaskValidationError: 快照内容不符合数据模型
        """
        try:
            tasks = _tasks_adapter.validate_python(data.get("tasks", []))
            templates = _templates_adapter.validate_python(data.get("templates", []))
            activities = _activities_adapter.validate_python(data.get("activities", []))
            calendars = _calendars_adapter.validate_python(data.get("calendars", []))
            events = _events_adapter.validate_python(data.get("calendar_events", []))
        except ValidationError as e:
            raise TaskValidationError(
                f"invalid snapshot: {e.error_count()} error(s)",
                errors=e.errors(include_url=False),
            ) from e

        for task in tasks:
            self.stores.task_store.put_task(task)
        for template in templates:
            self.stores.template_store.put_template(template)
        self.stores.activity_log.extend(activities)
        for calendar in calendars:
            self.stores.calendar_store.put_calendar(calendar)
        for event in events:
            self.stores.calendar_store.put_event(event)

        log.info(
            "snapshot_loaded",
            tasks=len(tasks),
            templates=len(templates),
            activities=len(activities),
            calendars=len(calendars),
            calendar_events=len(events),
        )


_SERVICE_METHODS = frozenset(
    {
        "create_task",
        "update_task",
        "move_task",
        "delete_task",
        "duplicate_task",
        "add_subtask",
        "update_subtask",
        "complete_subtask",
        "delete_subtask",
        "add_attachment",
        "remove_attachment",
        "add_reminder",
        "remove_reminder",
        "mark_reminder_sent",
        "add_comment",
        "log_activity",
        "create_template",
        "get_template",
        "list_templates",
        "delete_template",
        "create_task_from_template",
    }
)


def create_engine(
    config: EngineConfig | None = None,
    clock: Clock | None = None,
    store_group: StoreGroup | None = None,
) -> TaskEngine:
    """创建 TaskEngine

    Args:
        config: 引擎配置，默认从环境变量加载
        clock: 时钟，默认系统时钟（配置时区）
        store_group: Store 实例组，默认内存实现

    Returns:
        TaskEngine 实例
    """
    config = config or load_engine_config()
    engine = TaskEngine(
        store_group=store_group or create_store_group(),
        config=config,
        clock=clock or SystemClock(config.tzinfo),
    )
    log.debug(
        "engine_created",
        timezone=config.timezone,
        dependency_policy=config.dependency_policy.value,
    )
    return engine
