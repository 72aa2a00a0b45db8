"""Activity Payload 子类型

所有 Activity 的结构化 metadata 定义，写入时 model_dump(mode="json")。
"""

from pydantic import BaseModel, Field

from .enums import SubTaskStatus, TaskPriority, TaskStatus, TaskType


class TaskCreatedPayload(BaseModel):
    """task_created payload"""

    title: str
    type: TaskType
    priority: TaskPriority
    status: TaskStatus
    duplicated_from: str | None = Field(default=None, description="复制来源 Task ID")
    template_id: str | None = Field(default=None, description="实例化来源模板 ID")


class TaskUpdatedPayload(BaseModel):
    """task_updated payload"""

    changed_fields: list[str] = Field(description="发生变化的字段名（按字母序）")


class StatusChangedPayload(BaseModel):
    """task_status_changed / task_completed payload"""

    from_status: TaskStatus
    to_status: TaskStatus
    reason: str = Field(default="")


class TaskAssignedPayload(BaseModel):
    """task_assigned payload"""

    from_user_id: str | None = None
    to_user_id: str | None = None
    to_user_name: str | None = None


class TaskDeletedPayload(BaseModel):
    """task_deleted payload"""

    title: str
    subtask_count: int = Field(default=0)
    attachment_count: int = Field(default=0)
    reminder_count: int = Field(default=0)


class SubTaskPayload(BaseModel):
    """subtask_* payload"""

    subtask_id: str
    title: str
    status: SubTaskStatus
    changed_fields: list[str] = Field(default_factory=list)


class AttachmentPayload(BaseModel):
    """file_uploaded payload"""

    attachment_id: str
    filename: str
    file_size: int


class ReminderSentPayload(BaseModel):
    """reminder_sent payload"""

    reminder_id: str
    channel: str
    reminder_time: str


class CommentPayload(BaseModel):
    """comment_added payload"""

    text_preview: str = Field(description="评论预览（截断）")
    text_length: int = Field(description="原始文本长度")
