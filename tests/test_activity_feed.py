"""Activity Log / Feed 测试 -- 追加、过滤、按日分组"""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError
from tasklane.core.activity_feed import filter_activities, group_activities_by_day
from tasklane.core.models import (
    Activity,
    ActivityDateRange,
    ActivityFilter,
    ActivityType,
    EntityType,
    FeedRange,
)
from tasklane.core.store import InMemoryActivityLog


def make_activity(activity_id: str, created_at: datetime, **overrides) -> Activity:
    fields = {
        "activity_id": activity_id,
        "type": ActivityType.NOTE_ADDED,
        "title": f"note {activity_id}",
        "entity_type": EntityType.CONTACT,
        "entity_id": "c-1",
        "user_id": "u-alice",
        "user_name": "Alice",
        "created_at": created_at,
    }
    fields.update(overrides)
    return Activity(**fields)


class TestActivityLog:
    """InMemoryActivityLog"""

    def test_append_assigns_increasing_seq(self, now):
        log = InMemoryActivityLog()
        first = log.append(make_activity("a", now))
        second = log.append(make_activity("b", now))
        assert first.seq < second.seq
        assert len(log) == 2

    def test_activity_is_immutable(self, now):
        activity = make_activity("a", now)
        with pytest.raises(ValidationError):
            activity.title = "changed"

    def test_entity_query_newest_first(self, now):
        """同一时刻的记录按追加顺序倒序"""
        log = InMemoryActivityLog()
        log.append(make_activity("old", now - timedelta(hours=1)))
        log.append(make_activity("tie-1", now))
        log.append(make_activity("tie-2", now))
        log.append(make_activity("other", now, entity_id="c-2"))
        result = log.get_activities_for_entity("contact", "c-1")
        assert [a.activity_id for a in result] == ["tie-2", "tie-1", "old"]

    def test_extend_keeps_seq_order(self, now):
        source = InMemoryActivityLog()
        for name in ["a", "b", "c"]:
            source.append(make_activity(name, now))
        target = InMemoryActivityLog()
        target.extend(reversed(source.all()))
        assert [a.activity_id for a in target.all()] == ["a", "b", "c"]


class TestEngineActivities:
    """引擎写入的 Activity"""

    def test_every_mutation_recorded(self, engine, now):
        """每次写入操作都留下 Activity"""
        task = engine.create_task({"title": "x"})
        subtask = engine.add_subtask(task.task_id, {"title": "s"})
        engine.complete_subtask(task.task_id, subtask.subtask_id)
        engine.update_task(task.task_id, {"priority": "high"})
        engine.move_task(task.task_id, "in-progress")
        engine.add_comment(task.task_id, "hello")
        engine.delete_task(task.task_id)

        types = [a.type for a in engine.get_activities_for_entity("task", task.task_id)]
        assert types == [
            ActivityType.TASK_DELETED,
            ActivityType.COMMENT_ADDED,
            ActivityType.TASK_STATUS_CHANGED,
            ActivityType.TASK_UPDATED,
            ActivityType.TASK_UPDATED,
            ActivityType.SUBTASK_COMPLETED,
            ActivityType.SUBTASK_ADDED,
            ActivityType.TASK_CREATED,
        ]

    def test_default_feed_range_from_config(self, engine, clock):
        """未指定条件时使用配置的默认范围（week）"""
        old = engine.create_task({"title": "old"})
        clock.advance(timedelta(days=10))
        new = engine.create_task({"title": "new"})
        entity_ids = {a.entity_id for a in engine.filter_activities()}
        assert entity_ids == {new.task_id}
        assert old.task_id not in entity_ids


class TestFilterActivities:
    """组合过滤"""

    @pytest.fixture
    def activities(self, now):
        return [
            make_activity("today", now - timedelta(hours=2)),
            make_activity(
                "call",
                now - timedelta(days=3),
                type=ActivityType.CALL_LOGGED,
                title="Call with ACME",
                entity_type=EntityType.DEAL,
                user_id="u-bob",
                user_name="Bob",
            ),
            make_activity("older", now - timedelta(days=20)),
            make_activity("ancient", now - timedelta(days=90), description="Kickoff with acme"),
        ]

    def ids(self, activities) -> list[str]:
        return [a.activity_id for a in activities]

    def test_presets(self, activities, now):
        def run(preset):
            return self.ids(filter_activities(activities, ActivityFilter(preset=preset), now))

        assert run(FeedRange.TODAY) == ["today"]
        assert run(FeedRange.WEEK) == ["today", "call"]
        assert run(FeedRange.MONTH) == ["today", "call", "older"]
        assert run(FeedRange.ALL) == ["today", "call", "older", "ancient"]

    def test_types_and_users(self, activities, now):
        criteria = ActivityFilter(types={ActivityType.CALL_LOGGED}, user_ids={"u-bob"})
        assert self.ids(filter_activities(activities, criteria, now)) == ["call"]

    def test_entity_types(self, activities, now):
        criteria = ActivityFilter(entity_types={EntityType.CONTACT})
        assert "call" not in self.ids(filter_activities(activities, criteria, now))

    def test_search_title_description_user(self, activities, now):
        """搜索覆盖标题、描述、用户名（大小写不敏感）"""
        criteria = ActivityFilter(search_term="ACME")
        assert self.ids(filter_activities(activities, criteria, now)) == ["call", "ancient"]
        criteria = ActivityFilter(search_term="bob")
        assert self.ids(filter_activities(activities, criteria, now)) == ["call"]

    def test_date_range_inclusive(self, activities, now):
        start = now - timedelta(days=20)
        criteria = ActivityFilter(date_range=ActivityDateRange(start=start, end=now))
        assert self.ids(filter_activities(activities, criteria, now)) == [
            "today",
            "call",
            "older",
        ]

    def test_input_order_irrelevant(self, activities, now):
        forward = filter_activities(activities, ActivityFilter(), now)
        backward = filter_activities(list(reversed(activities)), ActivityFilter(), now)
        assert forward == backward

    def test_naive_now_treated_as_utc(self, activities, now):
        """naive now 与等价的 UTC now 结果一致"""
        naive_now = now.replace(tzinfo=None)
        for preset in FeedRange:
            criteria = ActivityFilter(preset=preset)
            assert filter_activities(activities, criteria, naive_now) == filter_activities(
                activities, criteria, now
            )

    def test_naive_activity_times(self, now):
        naive_now = now.replace(tzinfo=None)
        activities = [
            make_activity("recent", naive_now - timedelta(days=2)),
            make_activity("stale", naive_now - timedelta(days=10)),
        ]
        criteria = ActivityFilter(preset=FeedRange.WEEK)
        assert self.ids(filter_activities(activities, criteria, naive_now)) == ["recent"]
        assert self.ids(filter_activities(activities, criteria, now)) == ["recent"]


class TestGroupByDay:
    """按日分组"""

    def test_two_buckets_newest_first(self, now):
        """今天 3 条 + 昨天 2 条 -> 两组，今天在前，组内 newest first"""
        today = now.replace(hour=9)
        yesterday = today - timedelta(days=1)
        activities = [
            make_activity("y1", yesterday),
            make_activity("t1", today),
            make_activity("t2", today + timedelta(hours=1)),
            make_activity("y2", yesterday + timedelta(hours=2)),
            make_activity("t3", today + timedelta(hours=2)),
        ]
        groups = group_activities_by_day(activities)
        assert [key for key, _ in groups] == ["2026-10-14", "2026-10-13"]
        assert [a.activity_id for a in groups[0][1]] == ["t3", "t2", "t1"]
        assert [a.activity_id for a in groups[1][1]] == ["y2", "y1"]

    def test_local_timezone_buckets(self):
        """分组使用本地日期"""
        late = datetime(2026, 10, 14, 23, 30, tzinfo=UTC)
        activities = [make_activity("late", late)]
        assert group_activities_by_day(activities)[0][0] == "2026-10-14"
        tokyo = ZoneInfo("Asia/Tokyo")
        assert group_activities_by_day(activities, tokyo)[0][0] == "2026-10-15"

    def test_empty(self):
        assert group_activities_by_day([]) == []

    def test_engine_groups_all(self, engine):
        engine.create_task({"title": "x"})
        groups = engine.group_activities()
        assert len(groups) == 1
        assert groups[0][0] == "2026-10-14"
