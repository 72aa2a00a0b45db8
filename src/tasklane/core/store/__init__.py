"""tasklane Core Store -- 内存存储实现

提供工厂函数创建一组共享生命周期的 Store 实例。
"""

from .activity_log import InMemoryActivityLog
from .protocols import ActivityLog, CalendarEventStore, TaskStore, TemplateStore
from .task_store import InMemoryCalendarEventStore, InMemoryTaskStore, InMemoryTemplateStore


class StoreGroup:
    """Store 实例组 -- 由 TaskEngine 持有，不作为全局单例"""

    def __init__(
        self,
        task_store: TaskStore,
        template_store: TemplateStore,
        activity_log: ActivityLog,
        calendar_store: CalendarEventStore,
    ) -> None:
        self.task_store = task_store
        self.template_store = template_store
        self.activity_log = activity_log
        self.calendar_store = calendar_store


def create_store_group() -> StoreGroup:
    """创建内存 Store 实例组

    Returns:
        StoreGroup 实例
    """
    return StoreGroup(
        task_store=InMemoryTaskStore(),
        template_store=InMemoryTemplateStore(),
        activity_log=InMemoryActivityLog(),
        calendar_store=InMemoryCalendarEventStore(),
    )


__all__ = [
    "StoreGroup",
    "create_store_group",
    "TaskStore",
    "TemplateStore",
    "ActivityLog",
    "CalendarEventStore",
    "InMemoryTaskStore",
    "InMemoryTemplateStore",
    "InMemoryActivityLog",
    "InMemoryCalendarEventStore",
]
