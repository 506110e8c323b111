"""Запуск задач в календарные моменты: hourly_at, daily_at, weekly_at, monthly_at.

Последовательность одинакова для всех режимов:
1. Если run_on_init — выполнить задачу сразу. Если она упала
   и включён kill_on_error — завершиться, таймер не ставится никогда.
2. Один раз заснуть до ближайшего календарного момента (alignment.py).
3. Передать дальнейшие повторы в hourly/daily/weekly с run_on_init=True:
   первый выровненный вызов происходит сразу после пробуждения,
   следующие — ровно через период.

Время суток считается по шкале эпохи Unix (UTC), а проверка дня месяца
в monthly_at — по локальной календарной дате (или заданному часовому поясу).
"""

import asyncio
import inspect

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from tickwork.config.constants import MAX_DAY_OF_MONTH
from tickwork.core.exceptions import InvalidScheduleError
from tickwork.scheduler.alignment import (
    daily_schedule,
    delay_until_aligned,
    hourly_schedule,
    weekly_schedule,
)
from tickwork.scheduler.clock import SYSTEM_CLOCK, Clock
from tickwork.scheduler.models import Period, Schedule
from tickwork.scheduler.policy import DEFAULT_POLICY, Action, ErrorPolicy, invoke, report_failure
from tickwork.scheduler.repeater import RunningSchedule, daily, hourly, weekly
from tickwork.scheduler.runner import get_default_scheduler
from tickwork.utils.logging import get_logger

logger = get_logger(__name__)

# Обёртка периодического повтора для каждого периода
PERIOD_REPEATERS = {
    Period.HOUR: hourly,
    Period.DAY: daily,
    Period.WEEK: weekly,
}


class AlignedSchedule:
    """Расписание с выравниванием по календарю.

    Дескриптор живёт с момента start(): фоновая asyncio-задача выполняет
    немедленный запуск, спит до выровненного момента и затем создаёт
    ровно один RunningSchedule.

    Attributes:
        schedule: Период и смещение внутри периода.
        action: Задача без аргументов.
        policy: Политика обработки ошибок.
        name: Имя расписания.
        first_delay_ms: Задержка до первого выровненного вызова
            (None, пока не вычислена).
        running: Периодическое расписание после выравнивания (или None).
        killed: Остановлено ли расписание ошибкой немедленного запуска.
    """

    def __init__(
        self,
        schedule: Schedule,
        action: Action,
        policy: ErrorPolicy | None = None,
        *,
        clock: Clock | None = None,
        scheduler: AsyncIOScheduler | None = None,
        name: str | None = None,
    ) -> None:
        """Создать расписание (без запуска).

        Args:
            schedule: Период и смещение.
            action: Задача без аргументов, обычная или async.
            policy: Политика обработки ошибок.
            clock: Часы (по умолчанию — системные).
            scheduler: Планировщик APScheduler (по умолчанию — общий).
            name: Имя расписания (по умолчанию — имя функции задачи).
        """
        self.schedule = schedule
        self.action = action
        self.policy = policy or DEFAULT_POLICY
        self.name = name or getattr(action, "__name__", "action")

        self.first_delay_ms: int | None = None
        self.running: RunningSchedule | None = None
        self.killed = False

        self._clock = clock or SYSTEM_CLOCK
        self._scheduler = scheduler
        self._task: asyncio.Task[RunningSchedule | None] | None = None

    @property
    def active(self) -> bool:
        """Проверить, работает ли расписание (ожидает выравнивания или повторяется)."""
        if self.running is not None:
            return self.running.active
        return self._task is not None and not self._task.done()

    def start(self) -> "AlignedSchedule":
        """Запустить фоновую задачу выравнивания.

        Общий планировщик (если scheduler не передан) получается здесь же,
        поэтому ошибки настроек всплывают у вызывающего, а не в фоне.

        Должен вызываться из работающего event loop.

        Returns:
            Этот же дескриптор (для цепочек).

        Raises:
            ConfigurationError: Если настройки общего планировщика некорректны.
        """
        if self._task is None:
            self._scheduler = self._scheduler or get_default_scheduler()
            self._task = asyncio.create_task(self._run(), name=f"tickwork-{self.name}")
            self._task.add_done_callback(self._on_task_done)
        return self

    def cancel(self) -> None:
        """Остановить расписание на любой стадии.

        До выравнивания — прерывает ожидание, после — снимает таймер.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
        if self.running is not None:
            self.running.cancel()

    async def wait_until_armed(self) -> RunningSchedule | None:
        """Дождаться окончания выравнивания.

        Returns:
            Периодическое расписание или None, если расписание остановлено
            ошибкой немедленного запуска.
        """
        if self._task is None:
            msg = f"Расписание '{self.name}' не запущено"
            raise RuntimeError(msg)
        return await self._task

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Расписание '%s' остановлено из-за непредвиденной ошибки",
                self.name,
                exc_info=error,
            )

    async def _run(self) -> RunningSchedule | None:
        if self.policy.run_on_init:
            result = await invoke(self.action)
            if result.failed:
                await report_failure(self.policy, result, self.name)
                if self.policy.kill_on_error:
                    self.killed = True
                    logger.info(
                        "Расписание '%s' остановлено: ошибка при немедленном запуске",
                        self.name,
                    )
                    return None

        period, offset_ms = self.schedule.period, self.schedule.offset_ms
        self.first_delay_ms = delay_until_aligned(period, offset_ms, self._clock.now_ms())
        logger.debug(
            "Расписание '%s': первый запуск через %d мс (%s, смещение %d мс)",
            self.name,
            self.first_delay_ms,
            period.name,
            offset_ms,
        )
        await self._clock.sleep(self.first_delay_ms)

        repeat = PERIOD_REPEATERS[period]
        self.running = repeat(
            self.action,
            self.policy.with_run_on_init(),
            scheduler=self._scheduler,
            name=self.name,
        )
        return self.running


def hourly_at(
    minute: int,
    action: Action,
    policy: ErrorPolicy | None = None,
    *,
    clock: Clock | None = None,
    scheduler: AsyncIOScheduler | None = None,
    name: str | None = None,
) -> AlignedSchedule:
    """Запускать задачу каждый час в minute минут.

    Args:
        minute: Минута часа (0–59).
        action: Задача без аргументов, обычная или async.
        policy: Политика обработки ошибок.
        clock: Часы (для тестов).
        scheduler: Планировщик APScheduler (по умолчанию — общий).
        name: Имя расписания.

    Returns:
        Запущенный AlignedSchedule.

    Raises:
        InvalidScheduleError: Если минута вне 0–59.
    """
    return AlignedSchedule(
        hourly_schedule(minute), action, policy, clock=clock, scheduler=scheduler, name=name
    ).start()


def daily_at(
    time: str,
    action: Action,
    policy: ErrorPolicy | None = None,
    *,
    clock: Clock | None = None,
    scheduler: AsyncIOScheduler | None = None,
    name: str | None = None,
) -> AlignedSchedule:
    """Запускать задачу каждый день в заданное время.

    Время суток отсчитывается от полуночи по шкале эпохи (UTC).

    Args:
        time: Время "HH:MM", например "05:25".
        action: Задача без аргументов, обычная или async.
        policy: Политика обработки ошибок.
        clock: Часы (для тестов).
        scheduler: Планировщик APScheduler (по умолчанию — общий).
        name: Имя расписания.

    Returns:
        Запущенный AlignedSchedule.

    Raises:
        InvalidScheduleError: Если время не в формате HH:MM.
    """
    return AlignedSchedule(
        daily_schedule(time), action, policy, clock=clock, scheduler=scheduler, name=name
    ).start()


def weekly_at(
    day: str | int,
    time: str,
    action: Action,
    policy: ErrorPolicy | None = None,
    *,
    clock: Clock | None = None,
    scheduler: AsyncIOScheduler | None = None,
    name: str | None = None,
) -> AlignedSchedule:
    """Запускать задачу каждую неделю в заданный день и время.

    Args:
        day: Название дня ("monday") или номер 0–6 (0 — воскресенье).
        time: Время "HH:MM".
        action: Задача без аргументов, обычная или async.
        policy: Политика обработки ошибок.
        clock: Часы (для тестов).
        scheduler: Планировщик APScheduler (по умолчанию — общий).
        name: Имя расписания.

    Returns:
        Запущенный AlignedSchedule.

    Raises:
        InvalidScheduleError: Если день или время некорректны.
    """
    return AlignedSchedule(
        weekly_schedule(day, time), action, policy, clock=clock, scheduler=scheduler, name=name
    ).start()


def monthly_at(
    day_of_month: int,
    time: str,
    action: Action,
    policy: ErrorPolicy | None = None,
    *,
    timezone: str | None = None,
    clock: Clock | None = None,
    scheduler: AsyncIOScheduler | None = None,
    name: str | None = None,
) -> AlignedSchedule:
    """Запускать задачу каждый месяц в заданный день и время.

    Под капотом — daily_at с фильтром по дню месяца: в остальные дни
    срабатывание молча пропускается (это не ошибка, on_error не вызывается).
    Если в месяце нет такого дня (например, 31 в апреле), месяц пропускается.

    Args:
        day_of_month: День месяца (1–31).
        time: Время "HH:MM" (по шкале эпохи, UTC).
        action: Задача без аргументов, обычная или async.
        policy: Политика обработки ошибок.
        timezone: Часовой пояс для определения даты (None — локальное время).
        clock: Часы (для тестов).
        scheduler: Планировщик APScheduler (по умолчанию — общий).
        name: Имя расписания.

    Returns:
        Запущенный AlignedSchedule.

    Raises:
        InvalidScheduleError: Если день месяца вне 1–31 или время некорректно.
    """
    if (
        isinstance(day_of_month, bool)
        or not isinstance(day_of_month, int)
        or not 1 <= day_of_month <= MAX_DAY_OF_MONTH
    ):
        raise InvalidScheduleError(
            "day_of_month", day_of_month, f"ожидается целое число от 1 до {MAX_DAY_OF_MONTH}"
        )

    clock = clock or SYSTEM_CLOCK

    async def on_matching_day() -> None:
        if clock.today(timezone).day != day_of_month:
            return
        result = action()
        if inspect.isawaitable(result):
            await result

    return daily_at(
        time,
        on_matching_day,
        policy,
        clock=clock,
        scheduler=scheduler,
        name=name or getattr(action, "__name__", "action"),
    )
