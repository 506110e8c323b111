"""tickwork — периодический запуск задач в asyncio-приложении.

Пример:
    import asyncio

    from tickwork import ErrorPolicy, daily_at, every
    from tickwork.config.constants import MINUTE

    async def main() -> None:
        every(5 * MINUTE, refresh_cache)
        daily_at("05:25", send_report, ErrorPolicy(on_error=print))
        await asyncio.Event().wait()

    asyncio.run(main())
"""

from tickwork.config.constants import DAY, HOUR, MINUTE, SECOND, WEEK
from tickwork.core.exceptions import ConfigurationError, InvalidScheduleError, SchedulerError
from tickwork.scheduler import (
    AlignedSchedule,
    ErrorPolicy,
    RunningSchedule,
    daily,
    daily_at,
    every,
    hourly,
    hourly_at,
    monthly_at,
    weekly,
    weekly_at,
)

__version__ = "0.1.0"

__all__ = [
    "DAY",
    "HOUR",
    "MINUTE",
    "SECOND",
    "WEEK",
    "AlignedSchedule",
    "ConfigurationError",
    "ErrorPolicy",
    "InvalidScheduleError",
    "RunningSchedule",
    "SchedulerError",
    "daily",
    "daily_at",
    "every",
    "hourly",
    "hourly_at",
    "monthly_at",
    "weekly",
    "weekly_at",
]
