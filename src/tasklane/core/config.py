"""EngineConfig -- 引擎配置加载

从环境变量加载配置；非法取值记录 warning 并回退默认值，不阻塞启动。
"""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import BaseModel, Field, field_validator

from .models.enums import DependencyPolicy, FeedRange

log = structlog.get_logger()

# 每个今日完成的任务为生产力评分增加的分数
PRODUCTIVITY_PER_COMPLETION: int = 5

# 评论预览截断长度
COMMENT_PREVIEW_LENGTH: int = 200


class EngineConfig(BaseModel):
    """引擎配置

    环境变量:
        TASKLANE_TIMEZONE: 本地日/周/月边界使用的 IANA 时区（默认 UTC）
        TASKLANE_DEPENDENCY_POLICY: 依赖阻塞策略 ignore/warn/enforce（默认 ignore）
        TASKLANE_SYSTEM_USER_ID: 默认操作者 ID（默认 system）
        TASKLANE_SYSTEM_USER_NAME: 默认操作者名称（默认 System）
        TASKLANE_ACTIVITY_FEED_DEFAULT_RANGE: feed 默认时间范围（默认 week）
    """

    timezone: str = Field(default="UTC", description="IANA 时区名")
    dependency_policy: DependencyPolicy = Field(
        default=DependencyPolicy.IGNORE,
        description="依赖阻塞策略",
    )
    system_user_id: str = Field(default="system", min_length=1, description="默认操作者 ID")
    system_user_name: str = Field(default="System", min_length=1, description="默认操作者名称")
    activity_feed_default_range: FeedRange = Field(
        default=FeedRange.WEEK,
        description="Activity feed 默认时间范围",
    )

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {value}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def load_engine_config() -> EngineConfig:
    """从环境变量加载引擎配置

    环境变量映射:
        TASKLANE_TIMEZONE -> timezone (默认 "UTC")
        TASKLANE_DEPENDENCY_POLICY -> dependency_policy (默认 "ignore")
        TASKLANE_SYSTEM_USER_ID -> system_user_id (默认 "system")
        TASKLANE_SYSTEM_USER_NAME -> system_user_name (默认 "System")
        TASKLANE_ACTIVITY_FEED_DEFAULT_RANGE -> activity_feed_default_range (默认 "week")

    Returns:
        EngineConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("TASKLANE_TIMEZONE"):
        try:
            ZoneInfo(val)
            kwargs["timezone"] = val
        except (ZoneInfoNotFoundError, ValueError):
            log.warning(
                "invalid_timezone_config",
                env_var="TASKLANE_TIMEZONE",
                value=val,
                fallback="UTC",
            )

    if val := os.environ.get("TASKLANE_DEPENDENCY_POLICY"):
        try:
            kwargs["dependency_policy"] = DependencyPolicy(val.lower())
        except ValueError:
            log.warning(
                "invalid_dependency_policy_config",
                env_var="TASKLANE_DEPENDENCY_POLICY",
                value=val,
                fallback=DependencyPolicy.IGNORE.value,
            )

    if val := os.environ.get("TASKLANE_SYSTEM_USER_ID"):
        kwargs["system_user_id"] = val

    if val := os.environ.get("TASKLANE_SYSTEM_USER_NAME"):
        kwargs["system_user_name"] = val

    if val := os.environ.get("TASKLANE_ACTIVITY_FEED_DEFAULT_RANGE"):
        try:
            kwargs["activity_feed_default_range"] = FeedRange(val.lower())
        except ValueError:
            log.warning(
                "invalid_feed_range_config",
                env_var="TASKLANE_ACTIVITY_FEED_DEFAULT_RANGE",
                value=val,
                fallback=FeedRange.WEEK.value,
            )

    return EngineConfig(**kwargs)
