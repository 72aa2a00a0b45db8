"""Query Engine 测试 -- 过滤、搜索、排序、逾期推导"""

from datetime import UTC, datetime, timedelta

import pytest
from tasklane.core import query
from tasklane.core.models import (
    DateRange,
    DisplayStatus,
    SortDirection,
    TaskFilter,
    TaskSortOption,
    TaskStatus,
)


@pytest.fixture
def board(engine, now):
    """覆盖各种到期情况的任务集合"""
    return {
        "overdue": engine.create_task(
            {"title": "Send invoice", "due_date": now - timedelta(days=2), "priority": "urgent"}
        ),
        "earlier_today": engine.create_task(
            {"title": "Morning standup", "due_date": now - timedelta(hours=3)}
        ),
        "later_today": engine.create_task(
            {
                "title": "Call ACME",
                "due_date": now + timedelta(hours=2),
                "tags": ["sales"],
                "type": "call",
            }
        ),
        "tomorrow": engine.create_task(
            {"title": "Write proposal", "due_date": now + timedelta(days=1), "priority": "low"}
        ),
        "saturday": engine.create_task(
            {"title": "Weekly report", "due_date": datetime(2026, 10, 17, 12, 0, tzinfo=UTC)}
        ),
        "next_week": engine.create_task(
            {"title": "Plan offsite", "due_date": now + timedelta(days=10)}
        ),
        "no_due": engine.create_task(
            {"title": "Read book", "description": "about Negotiation", "priority": "high"}
        ),
        "done_overdue": engine.create_task(
            {"title": "Old done", "due_date": now - timedelta(days=5), "status": "completed"}
        ),
        "cancelled_today": engine.create_task(
            {"title": "Dropped", "due_date": now + timedelta(hours=1), "status": "cancelled"}
        ),
    }


def titles(tasks) -> list[str]:
    return [t.title for t in tasks]


class TestDueDerivation:
    """逾期 / 今日 / 明日 / 本周"""

    def test_overdue(self, engine, board):
        """过去到期的未关闭任务为逾期；已完成、已取消不算"""
        overdue = engine.get_overdue_tasks()
        assert titles(overdue) == ["Send invoice", "Morning standup"]

    def test_due_today_excludes_elapsed(self, engine, board):
        """今日已过的部分归入逾期，今日到期只含剩余时间"""
        assert titles(engine.get_tasks_due_today()) == ["Call ACME"]

    def test_overdue_and_due_today_exclusive(self, engine, board, now):
        for task in engine.list_tasks():
            assert not (query.is_overdue(task, now) and query.is_due_today(task, now))

    def test_due_tomorrow(self, engine, board):
        result = engine.get_filtered_tasks(TaskFilter(is_due_tomorrow=True))
        assert titles(result) == ["Write proposal"]

    def test_due_this_week(self, engine, board):
        """本周窗口 Sunday 起；周六到期仍在本周"""
        assert titles(engine.get_tasks_due_this_week()) == [
            "Call ACME",
            "Write proposal",
            "Weekly report",
        ]

    def test_completion_removes_overdue(self, engine, board):
        """逾期任务完成后立即不再逾期"""
        engine.update_task(board["overdue"].task_id, {"status": "completed"})
        assert "Send invoice" not in titles(engine.get_overdue_tasks())

    def test_display_status(self, engine, board, now):
        assert query.display_status(board["overdue"], now) == DisplayStatus.OVERDUE
        assert query.display_status(board["tomorrow"], now) == DisplayStatus.PENDING
        assert engine.display_status(board["done_overdue"].task_id) == "completed"
        # 存储状态不变
        assert engine.get_task(board["overdue"].task_id).status == TaskStatus.PENDING

    def test_naive_due_date_treated_as_local(self, engine, now):
        task = engine.create_task({"title": "naive", "due_date": datetime(2026, 10, 14, 18, 0)})
        assert query.is_due_today(task, now)


class TestFilters:
    """组合过滤"""

    def test_no_filter_returns_all(self, engine, board):
        assert len(engine.get_filtered_tasks()) == len(board)
        assert len(engine.get_filtered_tasks(TaskFilter())) == len(board)

    def test_conjunction(self, engine, board):
        """多个条件取交集"""
        result = engine.get_filtered_tasks(
            TaskFilter(statuses={TaskStatus.PENDING}, priorities={"urgent", "high"})
        )
        assert titles(result) == ["Send invoice", "Read book"]

    def test_false_flag_selects_complement(self, engine, board):
        result = engine.get_filtered_tasks(TaskFilter(is_overdue=False))
        assert "Send invoice" not in titles(result)
        assert len(result) == len(board) - 2

    def test_search_is_case_insensitive(self, engine, board):
        """搜索覆盖标题、描述、标签"""
        assert titles(engine.get_filtered_tasks(TaskFilter(search_term="acme"))) == ["Call ACME"]
        assert titles(engine.get_filtered_tasks(TaskFilter(search_term="NEGOTIATION"))) == [
            "Read book"
        ]
        assert titles(engine.get_filtered_tasks(TaskFilter(search_term="SALES"))) == ["Call ACME"]

    def test_blank_search_ignored(self, engine, board):
        assert len(engine.get_filtered_tasks(TaskFilter(search_term="  "))) == len(board)

    def test_tags_and_types(self, engine, board):
        assert titles(engine.get_filtered_tasks(TaskFilter(tags={"sales"}))) == ["Call ACME"]
        assert titles(engine.get_filtered_tasks(TaskFilter(types={"call"}))) == ["Call ACME"]

    def test_due_date_range(self, engine, board, now):
        result = engine.get_filtered_tasks(
            TaskFilter(due_date_range=DateRange(start=now, end=now + timedelta(days=1)))
        )
        assert titles(result) == ["Call ACME", "Write proposal", "Dropped"]

    def test_has_subtasks(self, engine, board):
        engine.create_task({"title": "With steps", "subtasks": [{"title": "s"}]})
        assert titles(engine.get_filtered_tasks(TaskFilter(has_subtasks=True))) == ["With steps"]

    def test_filter_does_not_mutate(self, engine, board):
        before = engine.list_tasks()
        engine.get_filtered_tasks(TaskFilter(statuses={TaskStatus.COMPLETED}))
        assert engine.list_tasks() == before

    def test_empty_collection(self, now):
        assert query.get_filtered_tasks([], TaskFilter(is_overdue=True), now) == []


class TestStatusColumns:
    """看板列"""

    def test_statuses_partition_collection(self, engine, board):
        """各状态列互不相交且并集为全集"""
        columns = [engine.get_tasks_by_status(status) for status in TaskStatus]
        ids = [t.task_id for column in columns for t in column]
        assert len(ids) == len(set(ids)) == len(board)

    def test_matches_filter(self, engine, board):
        for status in TaskStatus:
            assert engine.get_tasks_by_status(status) == engine.get_filtered_tasks(
                TaskFilter(statuses={status})
            )


class TestSorting:
    """排序"""

    def test_priority_rank(self, engine, board):
        result = engine.get_filtered_tasks(
            TaskFilter(statuses={TaskStatus.PENDING}),
            TaskSortOption(field="priority", direction=SortDirection.DESC),
        )
        assert [t.priority.value for t in result][:2] == ["urgent", "high"]
        assert result[-1].priority.value == "low"

    def test_none_last_both_directions(self, engine, board):
        """没有 due_date 的任务在升降序中都排最后"""
        for direction in SortDirection:
            result = engine.sort_tasks(
                engine.list_tasks(),
                TaskSortOption(field="due_date", direction=direction),
            )
            assert result[-1].title == "Read book"

    def test_due_date_ascending(self, engine, board):
        result = engine.sort_tasks(engine.list_tasks(), TaskSortOption(field="due_date"))
        assert result[0].title == "Old done"
        assert result[1].title == "Send invoice"

    def test_title_case_insensitive(self, engine):
        for title in ["banana", "Apple", "cherry"]:
            engine.create_task({"title": title})
        result = engine.sort_tasks(engine.list_tasks(), TaskSortOption(field="title"))
        assert titles(result) == ["Apple", "banana", "cherry"]

    def test_stable_for_ties(self, engine):
        """相等元素保持原有顺序"""
        for title in ["first", "second", "third"]:
            engine.create_task({"title": title})
        for direction in SortDirection:
            result = engine.sort_tasks(
                engine.list_tasks(),
                TaskSortOption(field="priority", direction=direction),
            )
            assert titles(result) == ["first", "second", "third"]

    def test_unknown_field_keeps_order(self, engine, board):
        result = engine.sort_tasks(engine.list_tasks(), TaskSortOption(field="nope"))
        assert result == engine.list_tasks()
