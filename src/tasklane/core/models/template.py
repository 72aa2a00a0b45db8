"""TaskTemplate Domain Model

模板只保存蓝图和 use_count 计数，不持有任何活动 Task。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .enums import DEFAULT_PRIORITY, DEFAULT_TASK_TYPE, TaskPriority, TaskType


class TemplateSubTask(BaseModel):
    """模板中的子任务蓝图（无 id / 时间戳，实例化时生成）"""

    title: str = Field(min_length=1, description="标题")
    description: str | None = Field(default=None, description="描述")
    assigned_user_id: str | None = Field(default=None, description="负责人 ID")


class TaskTemplate(BaseModel):
    """可复用的 Task 蓝图"""

    template_id: str = Field(description="唯一标识，ULID 格式")
    name: str = Field(min_length=1, description="模板名称")
    description: str | None = Field(default=None, description="模板描述")
    type: TaskType = Field(default=DEFAULT_TASK_TYPE, description="任务类型")
    priority: TaskPriority = Field(default=DEFAULT_PRIORITY, description="优先级")
    estimated_duration: int | None = Field(default=None, ge=0, description="预计耗时（分钟）")
    subtasks: list[TemplateSubTask] = Field(default_factory=list, description="默认子任务")
    tags: list[str] = Field(default_factory=list, description="默认标签")
    custom_fields: dict[str, Any] = Field(default_factory=dict, description="默认自定义字段")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    created_by: str = Field(default="system", description="创建者 ID")
    use_count: int = Field(default=0, ge=0, description="被实例化次数")


class TemplateCreate(BaseModel):
    """创建模板的输入"""

    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    description: str | None = None
    type: TaskType = DEFAULT_TASK_TYPE
    priority: TaskPriority = DEFAULT_PRIORITY
    estimated_duration: int | None = Field(default=None, ge=0)
    subtasks: list[TemplateSubTask] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    custom_fields: dict[str, Any] = Field(default_factory=dict)
