"""TaskFilter / TaskSortOption -- 组合查询条件

TaskFilter 是若干可选谓词的合取（AND），未设置的字段表示不约束。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import SortDirection, TaskPriority, TaskStatus, TaskType


class DateRange(BaseModel):
    """闭区间时间范围"""

    start: datetime = Field(description="起始（含）")
    end: datetime = Field(description="结束（含）")


class TaskFilter(BaseModel):
    """Task 组合过滤条件"""

    statuses: set[TaskStatus] | None = Field(default=None, description="状态集合")
    priorities: set[TaskPriority] | None = Field(default=None, description="优先级集合")
    types: set[TaskType] | None = Field(default=None, description="类型集合")
    assigned_users: set[str] | None = Field(default=None, description="负责人集合")
    tags: set[str] | None = Field(default=None, description="标签集合（与任务标签有交集即匹配）")
    search_term: str | None = Field(default=None, description="标题/描述/标签搜索")
    is_overdue: bool | None = Field(default=None, description="是否逾期")
    is_due_today: bool | None = Field(default=None, description="是否今天到期")
    is_due_tomorrow: bool | None = Field(default=None, description="是否明天到期")
    is_due_this_week: bool | None = Field(default=None, description="是否本周到期")
    date_range: DateRange | None = Field(default=None, description="created_at 范围")
    due_date_range: DateRange | None = Field(default=None, description="due_date 范围")
    has_attachments: bool | None = Field(default=None, description="是否有附件")
    has_subtasks: bool | None = Field(default=None, description="是否有子任务")
    contact_id: str | None = Field(default=None, description="关联联系人")
    deal_id: str | None = Field(default=None, description="关联商机")
    company_id: str | None = Field(default=None, description="关联公司")


class TaskSortOption(BaseModel):
    """排序选项"""

    field: str = Field(default="created_at", description="排序字段（Task 字段名）")
    direction: SortDirection = Field(default=SortDirection.ASC, description="排序方向")
