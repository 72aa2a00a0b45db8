"""Task Domain Model

Task 是唯一的事实来源；SubTask、TaskAttachment、TaskReminder 由 Task 独占持有，
生命周期不超过所属 Task。

不变量：
- completed_date 非空 当且仅当 status == completed
- updated_at >= created_at
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..dates import comparable
from .enums import (
    DEFAULT_PRIORITY,
    DEFAULT_TASK_TYPE,
    RecurrenceFrequency,
    ReminderType,
    SubTaskStatus,
    TaskPriority,
    TaskStatus,
    TaskType,
)


class RecurringPattern(BaseModel):
    """重复规则（值对象）-- 仅存储，核心引擎不展开"""

    frequency: RecurrenceFrequency = Field(description="重复频率")
    interval: int = Field(default=1, ge=1, description="每隔 N 个频率单位")
    days_of_week: list[int] = Field(
        default_factory=list,
        description="周几（0-6，Sunday = 0）",
    )
    day_of_month: int | None = Field(default=None, ge=1, le=31, description="每月第几天")
    end_date: datetime | None = Field(default=None, description="截止日期")
    max_occurrences: int | None = Field(default=None, ge=1, description="最多重复次数")

    @field_validator("days_of_week")
    @classmethod
    def _check_days_of_week(cls, value: list[int]) -> list[int]:
        for day in value:
            if not 0 <= day <= 6:
                raise ValueError(f"days_of_week 取值必须在 0-6 之间: {day}")
        return sorted(set(value))


class SubTask(BaseModel):
    """SubTask -- 子清单项，仅属于一个 Task"""

    subtask_id: str = Field(description="唯一标识，ULID 格式")
    parent_task_id: str = Field(description="所属 Task ID")
    title: str = Field(min_length=1, description="标题")
    description: str | None = Field(default=None, description="描述")
    status: SubTaskStatus = Field(default=SubTaskStatus.PENDING, description="状态")
    assigned_user_id: str | None = Field(default=None, description="负责人 ID")
    due_date: datetime | None = Field(default=None, description="截止时间")
    completed_date: datetime | None = Field(default=None, description="完成时间")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @model_validator(mode="after")
    def _check_completion(self) -> "SubTask":
        completed = self.status == SubTaskStatus.COMPLETED
        if completed != (self.completed_date is not None):
            raise ValueError("completed_date 必须且仅在 status == completed 时设置")
        return self


class TaskAttachment(BaseModel):
    """Task 附件元数据"""

    attachment_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="所属 Task ID")
    filename: str = Field(min_length=1, description="文件名")
    file_url: str = Field(description="文件地址")
    file_size: int = Field(default=0, ge=0, description="文件字节数")
    file_type: str = Field(default="application/octet-stream", description="MIME 类型")
    uploaded_at: datetime = Field(description="上传时间")
    uploaded_by: str = Field(description="上传者 ID")


class TaskReminder(BaseModel):
    """Task 提醒（仅数据，投递由外部调度器负责）"""

    reminder_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="所属 Task ID")
    reminder_time: datetime = Field(description="提醒时间")
    type: ReminderType = Field(default=ReminderType.PUSH, description="提醒渠道")
    message: str | None = Field(default=None, description="提醒内容")
    sent: bool = Field(default=False, description="是否已发送")
    sent_at: datetime | None = Field(default=None, description="发送时间")


class Task(BaseModel):
    """Task 数据模型

    status 只存储 TaskStatus 中的值；overdue 在读取时推导。
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="描述")
    type: TaskType = Field(default=DEFAULT_TASK_TYPE, description="任务类型")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    priority: TaskPriority = Field(default=DEFAULT_PRIORITY, description="优先级")
    tags: list[str] = Field(default_factory=list, description="标签（保持插入顺序）")

    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    due_date: datetime | None = Field(default=None, description="截止时间")
    completed_date: datetime | None = Field(default=None, description="完成时间")
    estimated_duration: int | None = Field(default=None, ge=0, description="预计耗时（分钟）")
    actual_duration: int | None = Field(default=None, ge=0, description="实际耗时（分钟）")

    assigned_user_id: str | None = Field(default=None, description="负责人 ID")
    assigned_user_name: str | None = Field(default=None, description="负责人名称")
    contact_id: str | None = Field(default=None, description="关联联系人 ID（不校验）")
    deal_id: str | None = Field(default=None, description="关联商机 ID（不校验）")
    company_id: str | None = Field(default=None, description="关联公司 ID（不校验）")
    dependencies: list[str] = Field(default_factory=list, description="前置任务 ID")
    parent_task_id: str | None = Field(default=None, description="父任务 ID")

    subtasks: list[SubTask] = Field(default_factory=list, description="子任务")
    attachments: list[TaskAttachment] = Field(default_factory=list, description="附件")
    reminders: list[TaskReminder] = Field(default_factory=list, description="提醒")

    custom_fields: dict[str, Any] = Field(default_factory=dict, description="自定义字段")
    created_by: str = Field(default="system", description="创建者 ID")
    completed_by: str | None = Field(default=None, description="完成者 ID")
    notes: str | None = Field(default=None, description="备注")
    location: str | None = Field(default=None, description="地点")
    is_recurring: bool = Field(default=False, description="是否重复任务")
    recurring_pattern: RecurringPattern | None = Field(default=None, description="重复规则")

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title 不能为空")
        return value

    @field_validator("tags", "dependencies")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        # 去重并保持首次出现顺序
        return list(dict.fromkeys(v for v in value if v))

    @model_validator(mode="after")
    def _check_invariants(self) -> "Task":
        completed = self.status == TaskStatus.COMPLETED
        if completed != (self.completed_date is not None):
            raise ValueError("completed_date 必须且仅在 status == completed 时设置")
        updated_at, created_at = comparable(self.updated_at, self.created_at)
        if updated_at < created_at:
            raise ValueError("updated_at 不能早于 created_at")
        return self

    @property
    def subtask_progress(self) -> float:
        """子任务完成比例（0.0 - 1.0），无子任务时为 0.0"""
        if not self.subtasks:
            return 0.0
        done = sum(1 for s in self.subtasks if s.status == SubTaskStatus.COMPLETED)
        return done / len(self.subtasks)

    def find_subtask(self, subtask_id: str) -> SubTask | None:
        for subtask in self.subtasks:
            if subtask.subtask_id == subtask_id:
                return subtask
        return None


class TaskCreate(BaseModel):
    """创建 Task 的输入 -- 服务端生成 task_id / created_at / updated_at"""

    model_config = {"extra": "forbid"}

    title: str
    description: str | None = None
    type: TaskType = DEFAULT_TASK_TYPE
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = DEFAULT_PRIORITY
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None
    completed_date: datetime | None = None
    estimated_duration: int | None = Field(default=None, ge=0)
    actual_duration: int | None = Field(default=None, ge=0)
    assigned_user_id: str | None = None
    assigned_user_name: str | None = None
    contact_id: str | None = None
    deal_id: str | None = None
    company_id: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    parent_task_id: str | None = None
    subtasks: list["SubTaskCreate"] = Field(default_factory=list)
    custom_fields: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None
    location: str | None = None
    is_recurring: bool = False
    recurring_pattern: RecurringPattern | None = None


class TaskUpdate(BaseModel):
    """Task 局部更新 -- 仅 model_fields_set 中的字段参与合并

    task_id / created_at 不可变，不在此处出现（extra="forbid" 直接拒绝）。
    """

    model_config = {"extra": "forbid"}

    title: str | None = None
    description: str | None = None
    type: TaskType | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    tags: list[str] | None = None
    due_date: datetime | None = None
    completed_date: datetime | None = None
    estimated_duration: int | None = Field(default=None, ge=0)
    actual_duration: int | None = Field(default=None, ge=0)
    assigned_user_id: str | None = None
    assigned_user_name: str | None = None
    contact_id: str | None = None
    deal_id: str | None = None
    company_id: str | None = None
    dependencies: list[str] | None = None
    parent_task_id: str | None = None
    custom_fields: dict[str, Any] | None = None
    notes: str | None = None
    location: str | None = None
    is_recurring: bool | None = None
    recurring_pattern: RecurringPattern | None = None


class SubTaskCreate(BaseModel):
    """创建 SubTask 的输入"""

    model_config = {"extra": "forbid"}

    title: str = Field(min_length=1)
    description: str | None = None
    status: SubTaskStatus = SubTaskStatus.PENDING
    assigned_user_id: str | None = None
    due_date: datetime | None = None


class SubTaskUpdate(BaseModel):
    """SubTask 局部更新"""

    model_config = {"extra": "forbid"}

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: SubTaskStatus | None = None
    assigned_user_id: str | None = None
    due_date: datetime | None = None
    completed_date: datetime | None = None


TaskCreate.model_rebuild()
