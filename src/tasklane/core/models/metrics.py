"""TaskMetrics -- 任务集合的聚合统计结果"""

from pydantic import BaseModel, Field

from .enums import TaskPriority, TaskStatus, TaskType


class TaskMetrics(BaseModel):
    """聚合统计

    breakdown 映射中每个枚举值都存在（默认 0），便于下游直接渲染。
    """

    total_tasks: int = Field(default=0, ge=0, description="任务总数")
    completed_tasks: int = Field(default=0, ge=0, description="已完成数")
    pending_tasks: int = Field(default=0, ge=0, description="待处理数")
    overdue_tasks: int = Field(default=0, ge=0, description="逾期数")
    tasks_completed_today: int = Field(default=0, ge=0, description="今日完成数")
    tasks_completed_this_week: int = Field(default=0, ge=0, description="本周完成数")
    tasks_completed_this_month: int = Field(default=0, ge=0, description="本月完成数")
    average_completion_time: float = Field(default=0.0, ge=0.0, description="平均完成耗时（天）")
    completion_rate: float = Field(default=0.0, ge=0.0, le=100.0, description="完成率（%）")
    tasks_by_type: dict[TaskType, int] = Field(default_factory=dict, description="按类型计数")
    tasks_by_priority: dict[TaskPriority, int] = Field(
        default_factory=dict,
        description="按优先级计数",
    )
    tasks_by_status: dict[TaskStatus, int] = Field(default_factory=dict, description="按状态计数")
    tasks_by_user: dict[str, int] = Field(default_factory=dict, description="按负责人计数")
    productivity_score: float = Field(default=0.0, ge=0.0, le=100.0, description="生产力评分")
