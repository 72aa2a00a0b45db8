"""CLI 入口模块 -- python -m tasklane.core <command> <snapshot.json>

支持的命令：
  metrics   输出 TaskMetrics JSON
  overdue   输出逾期任务（task_id 与标题）
  agenda    输出今日日历条目

日志写 stderr，结果写 stdout。
"""

import json
import sys
from pathlib import Path

import structlog

from .dates import day_window
from .engine import TaskEngine, create_engine
from .exceptions import TaskEngineError
from .logging_config import bind_actor, clear_actor, setup_logging

log = structlog.get_logger()

USAGE = """用法: python -m tasklane.core <command> <snapshot.json>
命令:
  metrics   输出 TaskMetrics JSON
  overdue   输出逾期任务
  agenda    输出今日日历条目（只含可见日历；未登记日历时含全部事件）"""


def main(argv: list[str] | None = None) -> int:
    """CLI 主入口

    Returns:
        进程退出码
    """
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 2:
        print(USAGE)
        return 1

    command, snapshot_path = argv[0], Path(argv[1])
    handler = COMMANDS.get(command)
    if handler is None:
        print(f"未知命令: {command}")
        print("可用命令: " + ", ".join(COMMANDS))
        return 1

    setup_logging()
    engine = create_engine()
    bind_actor(engine.config.system_user_id, engine.config.system_user_name)
    try:
        try:
            data = json.loads(snapshot_path.read_text(encoding="utf-8"))
            engine.load_snapshot(data)
        except (OSError, json.JSONDecodeError, TaskEngineError) as e:
            log.error("snapshot_load_failed", path=str(snapshot_path), error=str(e))
            print(f"无法读取快照: {snapshot_path}: {e}", file=sys.stderr)
            return 2

        handler(engine)
        return 0
    finally:
        clear_actor()


def show_metrics(engine: TaskEngine) -> None:
    print(engine.compute_metrics().model_dump_json(indent=2))


def show_overdue(engine: TaskEngine) -> None:
    rows = [
        {"task_id": task.task_id, "title": task.title, "due_date": task.due_date.isoformat()}
        for task in engine.get_overdue_tasks()
    ]
    print(json.dumps(rows, ensure_ascii=False, indent=2))


def show_agenda(engine: TaskEngine) -> None:
    start, end = day_window(engine.now())
    if engine.list_calendars():
        calendar_ids = engine.visible_calendar_ids()
    else:
        # 快照未登记日历时展示全部事件
        calendar_ids = {event.calendar_id for event in engine.list_calendar_events()}
    entries = engine.project_calendar(calendar_ids, start, end)
    print(
        json.dumps(
            [entry.model_dump(mode="json") for entry in entries],
            ensure_ascii=False,
            indent=2,
        )
    )


COMMANDS = {
    "metrics": show_metrics,
    "overdue": show_overdue,
    "agenda": show_agenda,
}


if __name__ == "__main__":
    sys.exit(main())
