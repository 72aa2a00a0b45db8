"""structlog 配置模块

dev 模式：pretty print 可读输出
json 模式：结构化 JSON 输出

日志统一写 stderr，CLI 的 stdout 只输出结果 JSON。
"""

import logging
import os
import sys

import structlog


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 配置

    参数未传入时读取环境变量：
    - TASKLANE_LOG_FORMAT: "json" 结构化输出 / "dev" (默认) 可读输出
    - TASKLANE_LOG_LEVEL: 日志级别（默认 INFO）
    """
    log_format = log_format or os.environ.get("TASKLANE_LOG_FORMAT", "dev")
    log_level = log_level or os.environ.get("TASKLANE_LOG_LEVEL", "INFO")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            ensure_ascii=False
        )
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def bind_actor(user_id: str, user_name: str) -> None:
    """将当前操作者绑定到 structlog contextvars，后续日志自动携带"""
    structlog.contextvars.bind_contextvars(actor_id=user_id, actor_name=user_name)


def clear_actor() -> None:
    structlog.contextvars.unbind_contextvars("actor_id", "actor_name")
