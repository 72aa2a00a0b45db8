"""TaskStore / TemplateStore / CalendarEventStore 内存实现

dict 保持插入顺序，作为查询层稳定排序的底层顺序。
读取返回深拷贝：调用方修改返回值不会影响已存储的数据。
"""

from ..models.calendar import Calendar, CalendarEvent
from ..models.task import Task
from ..models.template import TaskTemplate


class InMemoryTaskStore:
    """TaskStore 的内存实现"""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def put_task(self, task: Task) -> None:
        """插入或替换任务（替换时保留原位置）"""
        self._tasks[task.task_id] = task.model_copy(deep=True)

    def get_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if task is None:
            return None
        return task.model_copy(deep=True)

    def list_tasks(self) -> list[Task]:
        return [task.model_copy(deep=True) for task in self._tasks.values()]

    def delete_task(self, task_id: str) -> Task | None:
        """删除任务；子任务、附件、提醒随 Task 一起移除"""
        return self._tasks.pop(task_id, None)

    def clear(self) -> None:
        self._tasks.clear()

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks


class InMemoryTemplateStore:
    """TemplateStore 的内存实现"""

    def __init__(self) -> None:
        self._templates: dict[str, TaskTemplate] = {}

    def put_template(self, template: TaskTemplate) -> None:
        self._templates[template.template_id] = template.model_copy(deep=True)

    def get_template(self, template_id: str) -> TaskTemplate | None:
        template = self._templates.get(template_id)
        if template is None:
            return None
        return template.model_copy(deep=True)

    def list_templates(self) -> list[TaskTemplate]:
        return [t.model_copy(deep=True) for t in self._templates.values()]

    def delete_template(self, template_id: str) -> TaskTemplate | None:
        return self._templates.pop(template_id, None)

    def clear(self) -> None:
        self._templates.clear()


class InMemoryCalendarEventStore:
    """CalendarEventStore 的内存实现"""

    def __init__(self) -> None:
        self._calendars: dict[str, Calendar] = {}
        self._events: dict[str, CalendarEvent] = {}

    def put_calendar(self, calendar: Calendar) -> None:
        self._calendars[calendar.calendar_id] = calendar.model_copy(deep=True)

    def list_calendars(self) -> list[Calendar]:
        return [c.model_copy(deep=True) for c in self._calendars.values()]

    def put_event(self, event: CalendarEvent) -> None:
        self._events[event.event_id] = event.model_copy(deep=True)

    def list_events(self) -> list[CalendarEvent]:
        return [e.model_copy(deep=True) for e in self._events.values()]

    def clear(self) -> None:
        self._calendars.clear()
        self._events.clear()
