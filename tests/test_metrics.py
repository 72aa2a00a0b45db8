"""Metrics Engine 测试"""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from tasklane.core.metrics import UNASSIGNED_KEY, compute_metrics
from tasklane.core.models import Task, TaskPriority, TaskStatus, TaskType


class TestComputeMetrics:
    """compute_metrics"""

    def test_empty_collection(self, now):
        """空集合所有计数为 0，breakdown 仍包含全部枚举值"""
        metrics = compute_metrics([], now)
        assert metrics.total_tasks == 0
        assert metrics.completion_rate == 0.0
        assert metrics.average_completion_time == 0.0
        assert metrics.productivity_score == 0.0
        assert set(metrics.tasks_by_status) == set(TaskStatus)
        assert set(metrics.tasks_by_type) == set(TaskType)
        assert set(metrics.tasks_by_priority) == set(TaskPriority)
        assert all(v == 0 for v in metrics.tasks_by_status.values())

    def test_completion_rate(self, engine):
        """5 个任务完成 2 个 -> 40.0"""
        for i in range(5):
            engine.create_task({"title": f"t{i}", "status": "completed" if i < 2 else "pending"})
        metrics = engine.compute_metrics()
        assert metrics.total_tasks == 5
        assert metrics.completed_tasks == 2
        assert metrics.pending_tasks == 3
        assert metrics.completion_rate == pytest.approx(40.0)

    def test_productivity_score(self, engine):
        """completion_rate + 今日完成数 * 5，上限 100"""
        for i in range(5):
            engine.create_task({"title": f"t{i}", "status": "completed" if i < 2 else "pending"})
        assert engine.compute_metrics().productivity_score == pytest.approx(50.0)

        for i in range(20):
            engine.create_task({"title": f"done{i}", "status": "completed"})
        assert engine.compute_metrics().productivity_score == 100.0

    def test_completed_windows(self, engine, now):
        """今日 / 本周 / 本月完成数按本地窗口统计"""
        task_dates = [
            now - timedelta(hours=1),  # 今天
            datetime(2026, 10, 11, 8, 0, tzinfo=UTC),  # 周日，本周
            datetime(2026, 10, 2, 8, 0, tzinfo=UTC),  # 本月
            datetime(2026, 9, 30, 8, 0, tzinfo=UTC),  # 上月
        ]
        for i, done_at in enumerate(task_dates):
            task = engine.create_task({"title": f"t{i}"})
            engine.update_task(task.task_id, {"status": "completed", "completed_date": done_at})

        metrics = engine.compute_metrics()
        assert metrics.tasks_completed_today == 1
        assert metrics.tasks_completed_this_week == 2
        assert metrics.tasks_completed_this_month == 3

    def test_average_completion_time_in_days(self, engine, clock):
        task = engine.create_task({"title": "x"})
        clock.advance(timedelta(days=2))
        engine.update_task(task.task_id, {"status": "completed"})
        other = engine.create_task({"title": "y"})
        clock.advance(timedelta(days=1))
        engine.update_task(other.task_id, {"status": "completed"})

        # (2 + 1) / 2
        assert engine.compute_metrics().average_completion_time == pytest.approx(1.5)

    def test_overdue_shared_with_query(self, engine, now):
        engine.create_task({"title": "late", "due_date": now - timedelta(days=1)})
        engine.create_task(
            {"title": "late but done", "due_date": now - timedelta(days=1), "status": "completed"}
        )
        assert engine.compute_metrics().overdue_tasks == len(engine.get_overdue_tasks()) == 1

    def test_breakdowns(self, engine):
        engine.create_task({"title": "a", "type": "call", "assigned_user_id": "u-1"})
        engine.create_task({"title": "b", "type": "call", "priority": "urgent"})
        metrics = engine.compute_metrics()
        assert metrics.tasks_by_type[TaskType.CALL] == 2
        assert metrics.tasks_by_type[TaskType.EMAIL] == 0
        assert metrics.tasks_by_priority[TaskPriority.URGENT] == 1
        assert metrics.tasks_by_user == {"u-1": 1, UNASSIGNED_KEY: 1}

    def test_timezone_changes_day_window(self, now):
        """本地日边界由 now 的时区决定"""
        # 2026-10-14 23:30 UTC 在东京已是 10-15
        done_at = datetime(2026, 10, 14, 23, 30, tzinfo=UTC)
        task = Task(
            task_id="t-1",
            title="late night",
            status="completed",
            completed_date=done_at,
            created_at=done_at,
            updated_at=done_at,
        )
        tokyo_now = datetime(2026, 10, 15, 9, 0, tzinfo=ZoneInfo("Asia/Tokyo"))
        assert compute_metrics([task], tokyo_now).tasks_completed_today == 1
        utc_now = datetime(2026, 10, 15, 9, 0, tzinfo=UTC)
        assert compute_metrics([task], utc_now).tasks_completed_today == 0
