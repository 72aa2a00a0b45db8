"""Scheduler -- 引擎外部的提醒投递与重复任务展开

引擎本身没有定时器。宿主进程按自己的节奏调用 Scheduler.tick(now)：
1. 把到期未发送的提醒交给 ReminderSink，成功后回写 sent 并记录 reminder_sent
2. 对已完成的重复任务生成下一次实例；每个已完成任务只展开一次
   （新实例的 custom_fields["recurrence_source_id"] 指向来源任务）
   规则结束的任务写入 custom_fields["recurrence_finished"]
"""

import calendar
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Protocol

import structlog
from pydantic import BaseModel, Field

from .dates import aware
from .exceptions import TaskEngineError
from .models.enums import RecurrenceFrequency, TaskStatus, is_closed
from .models.task import RecurringPattern, SubTaskCreate, Task, TaskCreate, TaskReminder

if TYPE_CHECKING:
    from .engine import TaskEngine

log = structlog.get_logger()

RECURRENCE_SOURCE_KEY = "recurrence_source_id"
RECURRENCE_INDEX_KEY = "recurrence_index"
RECURRENCE_FINISHED_KEY = "recurrence_finished"


def _add_months(value: datetime, months: int, day: int | None = None) -> datetime:
    """按月偏移，日期超出目标月天数时取月末"""
    index = value.month - 1 + months
    year, month = value.year + index // 12, index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(day or value.day, last_day))


def _sunday_index(value: datetime) -> int:
    # date.weekday(): Monday == 0；RecurringPattern 使用 Sunday == 0
    return (value.weekday() + 1) % 7


def next_occurrence(
    pattern: RecurringPattern,
    after: datetime,
    occurrence_count: int = 1,
) -> datetime | None:
    """计算下一次发生时间

    Args:
        pattern: 重复规则
        after: 上一次发生时间
        occurrence_count: 已发生次数（含 after 对应的那一次）

    Returns:
        下一次发生时间；超过 end_date 或达到 max_occurrences 时返回 None
    """
    if pattern.max_occurrences is not None and occurrence_count >= pattern.max_occurrences:
        return None

    interval = pattern.interval
    if pattern.frequency == RecurrenceFrequency.DAILY:
        candidate = after + timedelta(days=interval)
    elif pattern.frequency == RecurrenceFrequency.WEEKLY:
        if pattern.days_of_week:
            today = _sunday_index(after)
            later = [d for d in pattern.days_of_week if d > today]
            if later:
                candidate = after + timedelta(days=later[0] - today)
            else:
                week_start = after - timedelta(days=today)
                candidate = week_start + timedelta(
                    weeks=interval,
                    days=pattern.days_of_week[0],
                )
        else:
            candidate = after + timedelta(weeks=interval)
    elif pattern.frequency == RecurrenceFrequency.MONTHLY:
        candidate = _add_months(after, interval, pattern.day_of_month)
    else:
        candidate = _add_months(after, 12 * interval)

    if pattern.end_date is not None and aware(candidate) > aware(pattern.end_date):
        return None
    return candidate


def due_reminders(
    tasks: Iterable[Task],
    now: datetime,
) -> list[tuple[Task, TaskReminder]]:
    """未关闭任务上到期（reminder_time <= now）且未发送的提醒"""
    now = aware(now)
    due: list[tuple[Task, TaskReminder]] = []
    for task in tasks:
        if is_closed(task.status):
            continue
        for reminder in task.reminders:
            if not reminder.sent and aware(reminder.reminder_time) <= now:
                due.append((task, reminder))
    return due


class ReminderSink(Protocol):
    """提醒投递渠道（邮件、推送、短信由宿主实现）"""

    def deliver(self, task: Task, reminder: TaskReminder) -> None:
        ...


class LoggingReminderSink:
    """只记录日志的投递渠道"""

    def deliver(self, task: Task, reminder: TaskReminder) -> None:
        log.info(
            "reminder_dispatched",
            task_id=task.task_id,
            reminder_id=reminder.reminder_id,
            channel=reminder.type.value,
        )


class TickResult(BaseModel):
    """一次 tick 的处理结果"""

    delivered_reminder_ids: list[str] = Field(default_factory=list, description="已投递提醒")
    failed_reminder_ids: list[str] = Field(default_factory=list, description="投递失败提醒")
    spawned_task_ids: list[str] = Field(default_factory=list, description="新生成的重复任务")


class Scheduler:
    """提醒投递 + 重复任务展开"""

    def __init__(self, engine: "TaskEngine", sink: ReminderSink | None = None) -> None:
        self._engine = engine
        self._sink = sink or LoggingReminderSink()

    def tick(self, now: datetime | None = None) -> TickResult:
        now = now or self._engine.now()
        result = TickResult()

        for task, reminder in due_reminders(self._engine.list_tasks(), now):
            try:
                self._sink.deliver(task, reminder)
            except Exception:
                # 未标记 sent，下次 tick 重试
                log.exception(
                    "reminder_delivery_failed",
                    task_id=task.task_id,
                    reminder_id=reminder.reminder_id,
                )
                result.failed_reminder_ids.append(reminder.reminder_id)
                continue
            self._engine.mark_reminder_sent(task.task_id, reminder.reminder_id)
            result.delivered_reminder_ids.append(reminder.reminder_id)

        for task in self._pending_recurrences():
            spawned = self.spawn_next(task)
            if spawned is not None:
                result.spawned_task_ids.append(spawned.task_id)

        if result.delivered_reminder_ids or result.failed_reminder_ids or result.spawned_task_ids:
            log.info(
                "scheduler_tick",
                delivered=len(result.delivered_reminder_ids),
                failed=len(result.failed_reminder_ids),
                spawned=len(result.spawned_task_ids),
            )
        return result

    def spawn_next(self, task: Task) -> Task | None:
        """为已完成的重复任务生成下一次实例；规则已结束时返回 None"""
        if not task.is_recurring or task.recurring_pattern is None:
            return None
        if task.status != TaskStatus.COMPLETED:
            raise TaskEngineError(f"task {task.task_id} is not completed")

        index = int(task.custom_fields.get(RECURRENCE_INDEX_KEY, 1))
        anchor = task.due_date or task.completed_date
        due = next_occurrence(task.recurring_pattern, anchor, index)
        if due is None:
            # 规则已结束：标记来源任务，后续 tick 不再处理
            self._engine.update_task(
                task.task_id,
                {"custom_fields": {**task.custom_fields, RECURRENCE_FINISHED_KEY: True}},
            )
            log.info("recurrence_finished", task_id=task.task_id, occurrences=index)
            return None

        data = TaskCreate(
            title=task.title,
            description=task.description,
            type=task.type,
            priority=task.priority,
            tags=list(task.tags),
            due_date=due,
            estimated_duration=task.estimated_duration,
            assigned_user_id=task.assigned_user_id,
            assigned_user_name=task.assigned_user_name,
            contact_id=task.contact_id,
            deal_id=task.deal_id,
            company_id=task.company_id,
            parent_task_id=task.parent_task_id,
            subtasks=[
                SubTaskCreate(
                    title=s.title,
                    description=s.description,
                    assigned_user_id=s.assigned_user_id,
                )
                for s in task.subtasks
            ],
            custom_fields={
                **task.custom_fields,
                RECURRENCE_SOURCE_KEY: task.task_id,
                RECURRENCE_INDEX_KEY: index + 1,
            },
            notes=task.notes,
            location=task.location,
            is_recurring=True,
            recurring_pattern=task.recurring_pattern,
        )
        spawned = self._engine.create_task(data)
        log.info(
            "recurrence_spawned",
            source_task_id=task.task_id,
            task_id=spawned.task_id,
            due_date=due.isoformat(),
        )
        return spawned

    def _pending_recurrences(self) -> list[Task]:
        """已完成、尚未展开过下一次实例的重复任务"""
        tasks = self._engine.list_tasks()
        expanded = {
            t.custom_fields.get(RECURRENCE_SOURCE_KEY)
            for t in tasks
            if RECURRENCE_SOURCE_KEY in t.custom_fields
        }
        return [
            t
            for t in tasks
            if t.is_recurring
            and t.recurring_pattern is not None
            and t.status == TaskStatus.COMPLETED
            and t.task_id not in expanded
            and not t.custom_fields.get(RECURRENCE_FINISHED_KEY)
        ]
