"""ActivityLog 内存实现

append-only：只允许追加，不允许更新或删除。
seq 全局严格单调递增，作为同一时刻 Activity 的确定性排序依据。
"""

from collections.abc import Iterable
from datetime import datetime

import structlog

from ..activity_feed import filter_activities, sort_newest_first
from ..models.activity import Activity, ActivityFilter
from ..models.enums import EntityType

log = structlog.get_logger()


class InMemoryActivityLog:
    """ActivityLog 的内存实现"""

    def __init__(self) -> None:
        self._activities: list[Activity] = []
        self._next_seq = 1

    def append(self, activity: Activity) -> Activity:
        """追加 Activity 并分配 seq

        Activity 为 frozen 模型，此处生成带 seq 的新实例。
        """
        stored = activity.model_copy(update={"seq": self._next_seq})
        self._next_seq += 1
        self._activities.append(stored)
        log.debug(
            "activity_appended",
            activity_id=stored.activity_id,
            type=stored.type.value,
            entity_id=stored.entity_id,
            seq=stored.seq,
        )
        return stored

    def extend(self, activities: Iterable[Activity]) -> None:
        """按原 seq 顺序批量追加（快照加载）"""
        for activity in sorted(activities, key=lambda a: a.seq):
            self.append(activity)

    def get_activities_for_entity(
        self,
        entity_type: EntityType | str,
        entity_id: str,
    ) -> list[Activity]:
        """查询指定主体的 Activity，newest first"""
        entity_type = EntityType(entity_type)
        return sort_newest_first(
            a
            for a in self._activities
            if a.entity_type == entity_type and a.entity_id == entity_id
        )

    def filter(self, criteria: ActivityFilter, now: datetime | None = None) -> list[Activity]:
        """按组合条件过滤，newest first"""
        return filter_activities(self._activities, criteria, now)

    def all(self) -> list[Activity]:
        return list(self._activities)

    def __len__(self) -> int:
        return len(self._activities)
