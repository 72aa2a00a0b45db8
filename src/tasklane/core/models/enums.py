"""枚举定义 -- Task / SubTask / Activity / Calendar 的封闭取值集合

包含 TaskStatus、TaskPriority、TaskType、ActivityType 等枚举，
以及 CLOSED_STATES 终态集合和排序用的 rank 映射。

overdue 不是可存储的状态：它只在读取时由 due_date 推导（见 DisplayStatus）。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 可存储状态"""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DisplayStatus(StrEnum):
    """展示状态 -- 在 TaskStatus 之上增加推导出的 overdue"""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    OVERDUE = "overdue"


# 终态：不再计入 overdue / due-today
CLOSED_STATES: set[TaskStatus] = {
    TaskStatus.COMPLETED,
    TaskStatus.CANCELLED,
}

# 依赖阻塞检查针对的目标状态
STARTED_STATES: set[TaskStatus] = {
    TaskStatus.IN_PROGRESS,
    TaskStatus.COMPLETED,
}


class TaskPriority(StrEnum):
    """Task 优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskType(StrEnum):
    """Task 类型"""

    FOLLOW_UP = "follow-up"
    MEETING = "meeting"
    CALL = "call"
    EMAIL = "email"
    PROPOSAL = "proposal"
    RESEARCH = "research"
    ADMINISTRATIVE = "administrative"
    OTHER = "other"


class SubTaskStatus(StrEnum):
    """SubTask 状态"""

    PENDING = "pending"
    COMPLETED = "completed"


class ReminderType(StrEnum):
    """提醒渠道"""

    EMAIL = "email"
    PUSH = "push"
    SMS = "sms"


class RecurrenceFrequency(StrEnum):
    """重复频率"""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ActivityType(StrEnum):
    """Activity 类型"""

    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_COMPLETED = "task_completed"
    TASK_DELETED = "task_deleted"
    TASK_ASSIGNED = "task_assigned"
    TASK_STATUS_CHANGED = "task_status_changed"
    SUBTASK_ADDED = "subtask_added"
    SUBTASK_UPDATED = "subtask_updated"
    SUBTASK_COMPLETED = "subtask_completed"
    SUBTASK_DELETED = "subtask_deleted"
    COMMENT_ADDED = "comment_added"
    CALL_LOGGED = "call_logged"
    EMAIL_SENT = "email_sent"
    MEETING_HELD = "meeting_held"
    NOTE_ADDED = "note_added"
    DEAL_MOVED = "deal_moved"
    CONTACT_UPDATED = "contact_updated"
    FILE_UPLOADED = "file_uploaded"
    REMINDER_SENT = "reminder_sent"


class EntityType(StrEnum):
    """Activity 主体类型"""

    TASK = "task"
    DEAL = "deal"
    CONTACT = "contact"
    COMPANY = "company"
    LEAD = "lead"


class SortDirection(StrEnum):
    """排序方向"""

    ASC = "asc"
    DESC = "desc"


class FeedRange(StrEnum):
    """Activity feed 预设时间范围"""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


class CalendarEntryKind(StrEnum):
    """日历条目来源"""

    TASK = "task"
    CALENDAR_EVENT = "calendar-event"


class DependencyPolicy(StrEnum):
    """依赖阻塞策略"""

    IGNORE = "ignore"
    WARN = "warn"
    ENFORCE = "enforce"


# 排序 rank：按声明顺序
PRIORITY_RANK: dict[TaskPriority, int] = {p: i for i, p in enumerate(TaskPriority)}
STATUS_RANK: dict[TaskStatus, int] = {s: i for i, s in enumerate(TaskStatus)}

# 创建 Task / 模板时的默认值
DEFAULT_TASK_TYPE: TaskType = TaskType.OTHER
DEFAULT_PRIORITY: TaskPriority = TaskPriority.MEDIUM


def is_closed(status: TaskStatus) -> bool:
    """状态是否为终态（completed / cancelled）

    Args:
        status: 当前状态

    Returns:
        True 如果为终态，否则 False
    """
    return status in CLOSED_STATES
