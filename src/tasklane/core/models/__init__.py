"""tasklane Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .activity import Activity, ActivityDateRange, ActivityFilter, Actor
from .calendar import Calendar, CalendarEntry, CalendarEvent, CalendarResource
from .enums import (
    CLOSED_STATES,
    DEFAULT_PRIORITY,
    DEFAULT_TASK_TYPE,
    PRIORITY_RANK,
    STARTED_STATES,
    STATUS_RANK,
    ActivityType,
    CalendarEntryKind,
    DependencyPolicy,
    DisplayStatus,
    EntityType,
    FeedRange,
    RecurrenceFrequency,
    ReminderType,
    SortDirection,
    SubTaskStatus,
    TaskPriority,
    TaskStatus,
    TaskType,
    is_closed,
)
from .filters import DateRange, TaskFilter, TaskSortOption
from .metrics import TaskMetrics
from .payloads import (
    AttachmentPayload,
    CommentPayload,
    ReminderSentPayload,
    StatusChangedPayload,
    SubTaskPayload,
    TaskAssignedPayload,
    TaskCreatedPayload,
    TaskDeletedPayload,
    TaskUpdatedPayload,
)
from .task import (
    RecurringPattern,
    SubTask,
    SubTaskCreate,
    SubTaskUpdate,
    Task,
    TaskAttachment,
    TaskCreate,
    TaskReminder,
    TaskUpdate,
)
from .template import TaskTemplate, TemplateCreate, TemplateSubTask

__all__ = [
    # 枚举
    "TaskStatus",
    "DisplayStatus",
    "TaskPriority",
    "TaskType",
    "SubTaskStatus",
    "ReminderType",
    "RecurrenceFrequency",
    "ActivityType",
    "EntityType",
    "SortDirection",
    "FeedRange",
    "CalendarEntryKind",
    "DependencyPolicy",
    "CLOSED_STATES",
    "STARTED_STATES",
    "PRIORITY_RANK",
    "STATUS_RANK",
    "DEFAULT_TASK_TYPE",
    "DEFAULT_PRIORITY",
    "is_closed",
    # Task
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "SubTask",
    "SubTaskCreate",
    "SubTaskUpdate",
    "TaskAttachment",
    "TaskReminder",
    "RecurringPattern",
    # Template
    "TaskTemplate",
    "TemplateCreate",
    "TemplateSubTask",
    # Activity
    "Activity",
    "ActivityFilter",
    "ActivityDateRange",
    "Actor",
    # Calendar
    "Calendar",
    "CalendarEvent",
    "CalendarEntry",
    "CalendarResource",
    # Query / Metrics
    "TaskFilter",
    "TaskSortOption",
    "DateRange",
    "TaskMetrics",
    # Payloads
    "TaskCreatedPayload",
    "TaskUpdatedPayload",
    "StatusChangedPayload",
    "TaskAssignedPayload",
    "TaskDeletedPayload",
    "SubTaskPayload",
    "AttachmentPayload",
    "ReminderSentPayload",
    "CommentPayload",
]
