"""Activity Domain Model

Activity 是不可变的审计记录：append-only，不允许更新或删除。
seq 由 ActivityLog 在追加时分配，全局严格单调递增。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import ActivityType, EntityType, FeedRange


class Actor(BaseModel):
    """操作者信息"""

    user_id: str = Field(description="用户 ID")
    user_name: str = Field(description="用户名称")


class Activity(BaseModel):
    """Activity 数据模型"""

    model_config = ConfigDict(frozen=True)

    activity_id: str = Field(description="唯一标识，ULID 格式，时间有序")
    seq: int = Field(default=0, ge=0, description="追加序号，由 ActivityLog 分配")
    type: ActivityType = Field(description="Activity 类型")
    title: str = Field(description="标题")
    description: str | None = Field(default=None, description="描述")
    entity_type: EntityType = Field(description="主体类型")
    entity_id: str = Field(description="主体 ID")
    user_id: str = Field(description="操作者 ID")
    user_name: str = Field(description="操作者名称")
    metadata: dict[str, Any] = Field(default_factory=dict, description="结构化 payload")
    created_at: datetime = Field(description="创建时间")
    is_important: bool = Field(default=False, description="是否重要")
    is_private: bool = Field(default=False, description="是否私有")


class ActivityDateRange(BaseModel):
    """闭区间时间范围"""

    start: datetime | None = Field(default=None, description="起始（含）")
    end: datetime | None = Field(default=None, description="结束（含）")


class ActivityFilter(BaseModel):
    """Activity 组合过滤条件 -- 所有字段可选，未设置表示不约束"""

    types: set[ActivityType] | None = Field(default=None, description="类型集合")
    entity_types: set[EntityType] | None = Field(default=None, description="主体类型集合")
    user_ids: set[str] | None = Field(default=None, description="操作者集合")
    date_range: ActivityDateRange | None = Field(default=None, description="时间范围")
    preset: FeedRange | None = Field(default=None, description="预设时间范围")
    search_term: str | None = Field(default=None, description="标题/描述/用户名搜索")
