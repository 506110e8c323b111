"""Периодический запуск задачи с фиксированным интервалом.

RunningSchedule — владеющий дескриптор одного расписания:
- При start() ставит интервальную задачу в APScheduler
- На каждом срабатывании запускает вызов задачи отдельной asyncio-задачей,
  поэтому медленная задача не задерживает следующие срабатывания
  (вызовы могут перекрываться)
- При run_on_init запускает немедленный вызов параллельно с таймером:
  немедленный вызов не сдвигает фазу таймера и не ждёт его
- При kill_on_error снимает таймер после неудачного вызова

Интервал отсчитывается от момента start(), без календарного выравнивания.
Выравнивание — в модуле aligned.py.
"""

import asyncio
import uuid
from collections.abc import Coroutine
from datetime import datetime
from typing import Any

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tickwork.config.constants import DAY, HOUR, WEEK
from tickwork.core.exceptions import InvalidScheduleError
from tickwork.scheduler.policy import DEFAULT_POLICY, Action, ErrorPolicy, invoke, report_failure
from tickwork.scheduler.runner import get_default_scheduler
from tickwork.utils.logging import get_logger

logger = get_logger(__name__)


class RunningSchedule:
    """Расписание "каждые interval_ms миллисекунд".

    Attributes:
        interval_ms: Интервал между срабатываниями.
        action: Задача без аргументов.
        policy: Политика обработки ошибок.
        name: Имя расписания (для логов и id задачи в APScheduler).
        invocations: Сколько раз задача была вызвана.
        failures: Сколько вызовов завершились ошибкой.
        init_failed: Завершился ли ошибкой немедленный вызов (run_on_init).
        initial_run: asyncio-задача немедленного вызова (если был).
    """

    def __init__(
        self,
        interval_ms: int,
        action: Action,
        policy: ErrorPolicy | None = None,
        *,
        scheduler: AsyncIOScheduler | None = None,
        name: str | None = None,
    ) -> None:
        """Создать расписание (без запуска).

        Args:
            interval_ms: Интервал в миллисекундах (> 0).
            action: Задача без аргументов, обычная или async.
            policy: Политика обработки ошибок (по умолчанию — всё выключено).
            scheduler: Планировщик APScheduler (по умолчанию — общий).
            name: Имя расписания (по умолчанию — имя функции задачи).

        Raises:
            InvalidScheduleError: Если интервал не положительный.
        """
        if isinstance(interval_ms, bool) or not isinstance(interval_ms, int) or interval_ms <= 0:
            raise InvalidScheduleError(
                "interval_ms", interval_ms, "ожидается положительное целое число"
            )

        self.interval_ms = interval_ms
        self.action = action
        self.policy = policy or DEFAULT_POLICY
        self.name = name or getattr(action, "__name__", "action")

        self.invocations = 0
        self.failures = 0
        self.init_failed = False
        self.initial_run: asyncio.Task[None] | None = None

        self._scheduler = scheduler
        self._job: Job | None = None
        self._cancelled = False
        # Ссылки на запущенные вызовы, чтобы их не собрал GC
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def active(self) -> bool:
        """Проверить, взведён ли периодический таймер."""
        return self._job is not None and not self._cancelled

    @property
    def next_run_time(self) -> datetime | None:
        """Время следующего срабатывания (None, если неизвестно или отменено)."""
        if not self.active:
            return None
        return getattr(self._job, "next_run_time", None)

    def start(self) -> "RunningSchedule":
        """Взвести таймер и, при run_on_init, запустить немедленный вызов.

        Должен вызываться из работающего event loop. Таймер ставится
        до немедленного вызова, и они идут независимо друг от друга.

        Returns:
            Этот же дескриптор (для цепочек).
        """
        if self._job is not None:
            logger.warning("Расписание '%s' уже запущено", self.name)
            return self

        scheduler = self._scheduler or get_default_scheduler()
        self._job = scheduler.add_job(
            self._fire,
            trigger=IntervalTrigger(seconds=self.interval_ms / 1000),
            id=f"{self.name}-{uuid.uuid4().hex[:8]}",
            name=self.name,
        )
        self._scheduler = scheduler
        logger.debug("Расписание '%s': таймер взведён, каждые %d мс", self.name, self.interval_ms)

        if self.policy.run_on_init:
            self.initial_run = self._spawn(self._run_initial())

        return self

    def cancel(self) -> None:
        """Снять периодический таймер.

        Уже запущенные вызовы задачи не прерываются. Повторный вызов безопасен.
        """
        if self._cancelled:
            return
        self._cancelled = True

        if self._job is not None and self._scheduler is not None:
            try:
                self._scheduler.remove_job(self._job.id)
            except JobLookupError:
                logger.debug("Расписание '%s': задача уже снята с планировщика", self.name)

        logger.debug("Расписание '%s' отменено", self.name)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _fire(self) -> None:
        """Срабатывание таймера APScheduler.

        Только запускает вызов и сразу возвращается, чтобы APScheduler
        не ограничивал перекрывающиеся вызовы (max_instances).
        """
        self._spawn(self._tick())

    async def _tick(self) -> None:
        """Один периодический вызов с применением политики."""
        if self._cancelled:
            return

        if self.policy.kill_on_error and self.init_failed:
            logger.info("Расписание '%s' остановлено: ошибка при немедленном запуске", self.name)
            self.cancel()
            return

        self.invocations += 1
        result = await invoke(self.action)
        if result.succeeded:
            return

        self.failures += 1
        await report_failure(self.policy, result, self.name)

        if self.policy.kill_on_error:
            logger.info("Расписание '%s' остановлено после ошибки (kill_on_error)", self.name)
            self.cancel()

    async def _run_initial(self) -> None:
        """Немедленный вызов при run_on_init, вне периодического цикла."""
        self.invocations += 1
        result = await invoke(self.action)
        if result.succeeded:
            return

        self.failures += 1
        self.init_failed = True
        await report_failure(self.policy, result, self.name)


def every(
    interval_ms: int,
    action: Action,
    policy: ErrorPolicy | None = None,
    *,
    scheduler: AsyncIOScheduler | None = None,
    name: str | None = None,
) -> RunningSchedule:
    """Запускать задачу каждые interval_ms миллисекунд.

    Args:
        interval_ms: Интервал в миллисекундах.
        action: Задача без аргументов, обычная или async.
        policy: Политика обработки ошибок.
        scheduler: Планировщик APScheduler (по умолчанию — общий).
        name: Имя расписания.

    Returns:
        Запущенный RunningSchedule.

    Example:
        every(30 * SECOND, refresh_cache, ErrorPolicy(on_error=report))
    """
    return RunningSchedule(interval_ms, action, policy, scheduler=scheduler, name=name).start()


def hourly(
    action: Action,
    policy: ErrorPolicy | None = None,
    *,
    scheduler: AsyncIOScheduler | None = None,
    name: str | None = None,
) -> RunningSchedule:
    """Запускать задачу раз в час (от момента вызова)."""
    return every(HOUR, action, policy, scheduler=scheduler, name=name)


def daily(
    action: Action,
    policy: ErrorPolicy | None = None,
    *,
    scheduler: AsyncIOScheduler | None = None,
    name: str | None = None,
) -> RunningSchedule:
    """Запускать задачу раз в сутки (от момента вызова)."""
    return every(DAY, action, policy, scheduler=scheduler, name=name)


def weekly(
    action: Action,
    policy: ErrorPolicy | None = None,
    *,
    scheduler: AsyncIOScheduler | None = None,
    name: str | None = None,
) -> RunningSchedule:
    """Запускать задачу раз в неделю (от момента вызова)."""
    return every(WEEK, action, policy, scheduler=scheduler, name=name)
