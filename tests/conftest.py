"""全局 pytest 配置 -- 固定时钟 + 内存引擎 fixture"""

from datetime import UTC, datetime

import pytest
from tasklane.core.config import EngineConfig
from tasklane.core.dates import FixedClock
from tasklane.core.engine import TaskEngine, create_engine
from tasklane.core.logging_config import setup_logging
from tasklane.core.models import Actor

# 2026-10-14 是周三；本周窗口为 [10-11 周日, 10-18 周日)
NOW = datetime(2026, 10, 14, 15, 0, tzinfo=UTC)


@pytest.fixture(scope="session", autouse=True)
def _logging():
    """日志统一走 stderr，避免干扰 CLI 的 stdout 输出"""
    setup_logging(log_format="json", log_level="WARNING")


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    """固定在 NOW 的可推进时钟"""
    return FixedClock(NOW)


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def engine(config: EngineConfig, clock: FixedClock) -> TaskEngine:
    """UTC、依赖策略 ignore 的内存引擎"""
    return create_engine(config=config, clock=clock)


@pytest.fixture
def alice() -> Actor:
    return Actor(user_id="u-alice", user_name="Alice")
