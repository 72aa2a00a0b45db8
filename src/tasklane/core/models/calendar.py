"""Calendar Domain Model

CalendarEvent 与 Task 相互独立，可选通过 task_id 交叉引用。
CalendarEntry 是投影输出，供日历视图直接渲染。
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from ..dates import comparable
from .enums import CalendarEntryKind, TaskPriority, TaskStatus
from .task import RecurringPattern


class Calendar(BaseModel):
    """日历"""

    calendar_id: str = Field(description="唯一标识")
    name: str = Field(description="名称")
    description: str | None = Field(default=None, description="描述")
    color: str = Field(default="#3174ad", description="显示颜色")
    is_default: bool = Field(default=False, description="是否默认日历")
    is_visible: bool = Field(default=True, description="默认是否可见")


class CalendarEvent(BaseModel):
    """日历事件"""

    event_id: str = Field(description="唯一标识，ULID 格式")
    calendar_id: str = Field(description="所属日历 ID")
    title: str = Field(description="标题")
    description: str | None = Field(default=None, description="描述")
    start_date: datetime = Field(description="开始时间")
    end_date: datetime = Field(description="结束时间")
    is_all_day: bool = Field(default=False, description="是否全天")
    location: str | None = Field(default=None, description="地点")
    attendees: list[str] = Field(default_factory=list, description="参与者 ID")
    task_id: str | None = Field(default=None, description="关联 Task ID")
    deal_id: str | None = Field(default=None, description="关联商机 ID")
    contact_id: str | None = Field(default=None, description="关联联系人 ID")
    reminder_minutes: list[int] = Field(default_factory=list, description="提前提醒分钟数")
    recurrence: RecurringPattern | None = Field(default=None, description="重复规则")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    created_by: str = Field(default="system", description="创建者 ID")

    @model_validator(mode="after")
    def _check_range(self) -> "CalendarEvent":
        end_date, start_date = comparable(self.end_date, self.start_date)
        if end_date < start_date:
            raise ValueError("end_date 不能早于 start_date")
        return self


class CalendarResource(BaseModel):
    """日历条目附带的渲染信息"""

    kind: CalendarEntryKind = Field(description="条目来源")
    source_id: str = Field(description="Task ID 或 CalendarEvent ID")
    priority: TaskPriority | None = Field(default=None, description="Task 优先级")
    status: TaskStatus | None = Field(default=None, description="Task 状态")
    calendar_id: str | None = Field(default=None, description="所属日历 ID")


class CalendarEntry(BaseModel):
    """日历投影条目"""

    entry_id: str = Field(description="条目 ID（等于来源 ID）")
    title: str = Field(description="标题")
    start: datetime = Field(description="开始时间")
    end: datetime = Field(description="结束时间")
    all_day: bool = Field(description="是否全天")
    resource: CalendarResource = Field(description="渲染信息")
