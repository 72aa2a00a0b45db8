"""tasklane Core Services -- 写入服务"""

from .task_service import TaskService

__all__ = ["TaskService"]
