"""Планировщик периодических задач.

Режимы:
- every / hourly / daily / weekly — фиксированный интервал от момента запуска
- hourly_at / daily_at / weekly_at — выравнивание по календарю (шкала эпохи, UTC)
- monthly_at — daily_at с фильтром по дню месяца

Все режимы используют одну политику ошибок (ErrorPolicy).
"""

from tickwork.scheduler.aligned import (
    AlignedSchedule,
    daily_at,
    hourly_at,
    monthly_at,
    weekly_at,
)
from tickwork.scheduler.alignment import delay_until_aligned
from tickwork.scheduler.clock import SYSTEM_CLOCK, Clock
from tickwork.scheduler.models import InvocationResult, Period, Schedule
from tickwork.scheduler.policy import ErrorPolicy
from tickwork.scheduler.repeater import RunningSchedule, daily, every, hourly, weekly
from tickwork.scheduler.runner import (
    create_scheduler,
    get_default_scheduler,
    shutdown_default_scheduler,
    start_scheduler,
    stop_scheduler,
)

__all__ = [
    "SYSTEM_CLOCK",
    "AlignedSchedule",
    "Clock",
    "ErrorPolicy",
    "InvocationResult",
    "Period",
    "RunningSchedule",
    "Schedule",
    "create_scheduler",
    "daily",
    "daily_at",
    "delay_until_aligned",
    "every",
    "get_default_scheduler",
    "hourly",
    "hourly_at",
    "monthly_at",
    "shutdown_default_scheduler",
    "start_scheduler",
    "stop_scheduler",
    "weekly",
    "weekly_at",
]
