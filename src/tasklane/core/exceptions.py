"""tasklane 异常体系

Mutation API 边界统一抛出以下类型化异常；
查询、统计、日历投影层不抛异常。
"""

from typing import Any


class TaskEngineError(Exception):
    """tasklane 基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 调用方修正输入后是否可重试
        """
        super().__init__(message)
        self.recoverable = recoverable


class NotFoundError(TaskEngineError):
    """引用的实体不存在"""

    entity = "entity"

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"{self.entity} not found: {entity_id}")
        self.entity_id = entity_id


class TaskNotFoundError(NotFoundError):
    entity = "task"


class SubTaskNotFoundError(NotFoundError):
    entity = "subtask"


class AttachmentNotFoundError(NotFoundError):
    entity = "attachment"


class ReminderNotFoundError(NotFoundError):
    entity = "reminder"


class TemplateNotFoundError(NotFoundError):
    entity = "template"


class TaskValidationError(TaskEngineError):
    """输入校验失败（空标题、非法枚举值、不可变字段等）"""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        """
        Args:
            message: 错误描述
            errors: pydantic 校验错误明细
        """
        super().__init__(message)
        self.errors = errors or []


class InvariantViolationError(TaskEngineError):
    """写入会破坏不变量（completed_date 与 status 不一致、依赖成环等）"""


class DependencyBlockedError(TaskEngineError):
    """enforce 策略下，任务的前置依赖尚未完成"""

    def __init__(self, task_id: str, blocking_ids: list[str]) -> None:
        """
        Args:
            task_id: 被阻塞的任务
            blocking_ids: 尚未完成的前置任务 ID
        """
        super().__init__(
            f"task {task_id} is blocked by unfinished dependencies: "
            + ", ".join(blocking_ids)
        )
        self.task_id = task_id
        self.blocking_ids = blocking_ids
