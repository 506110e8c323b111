"""Часы и ожидание — единственный примитив времени планировщика.

Все вычисления выравнивания берут "сейчас" из Clock.now_ms(),
а ожидание делается через Clock.sleep(). В тестах вместо SYSTEM_CLOCK
подставляются фейковые часы.
"""

import asyncio
import time
from datetime import date

from tickwork.utils.timezone import today_in_timezone


class Clock:
    """Системные часы на основе time.time() и asyncio.sleep()."""

    def now_ms(self) -> int:
        """Текущее время в миллисекундах от эпохи Unix."""
        return time.time_ns() // 1_000_000

    async def sleep(self, ms: int) -> None:
        """Приостановить текущую корутину на ms миллисекунд."""
        await asyncio.sleep(ms / 1000)

    def today(self, timezone_name: str | None = None) -> date:
        """Текущая календарная дата.

        Args:
            timezone_name: Часовой пояс IANA; None — локальное время системы.
        """
        return today_in_timezone(timezone_name)


SYSTEM_CLOCK = Clock()
