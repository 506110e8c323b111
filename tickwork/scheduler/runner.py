"""Управление бэкендом планировщика (APScheduler).

Периодические таймеры расписаний — это интервальные задачи
AsyncIOScheduler. Этот модуль предоставляет функции для:
- Создания и настройки планировщика
- Запуска и остановки планировщика
- Доступа к общему планировщику по умолчанию

Пример использования:
    from tickwork.scheduler.runner import create_scheduler, start_scheduler, stop_scheduler

    scheduler = create_scheduler()
    start_scheduler(scheduler)
    every(5 * SECOND, job, scheduler=scheduler)
    ...
    stop_scheduler(scheduler)
"""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from tickwork.config.models import SchedulerSettings
from tickwork.config.settings import load_settings
from tickwork.utils.logging import get_logger

logger = get_logger(__name__)

_default_scheduler: AsyncIOScheduler | None = None
_default_loop: asyncio.AbstractEventLoop | None = None


def create_scheduler(settings: SchedulerSettings | None = None) -> AsyncIOScheduler:
    """Создать и настроить планировщик задач.

    Планировщик НЕ запускается автоматически — нужно вызвать start_scheduler().
    Задачи, добавленные до запуска, ждут его и не срабатывают.

    Параметры задач по умолчанию:
    - coalesce=True: пропущенные запуски схлопываются в один,
      догоняющих запусков после паузы процесса нет
    - misfire_grace_time: из настроек (None — запускать с любым опозданием)

    Args:
        settings: Настройки планировщика (по умолчанию — значения по умолчанию).

    Returns:
        Настроенный экземпляр AsyncIOScheduler (не запущенный).
    """
    settings = settings or SchedulerSettings()

    scheduler = AsyncIOScheduler(
        timezone=settings.timezone,
        job_defaults={
            "coalesce": True,
            "misfire_grace_time": settings.misfire_grace_time,
        },
    )
    logger.debug("Планировщик создан (timezone=%s)", settings.timezone)
    return scheduler


def start_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Запустить планировщик.

    Должен вызываться из работающего event loop: планировщик
    работает в фоне и не блокирует его.

    Args:
        scheduler: Экземпляр AsyncIOScheduler.
    """
    if scheduler.running:
        logger.warning("Планировщик уже запущен")
        return

    scheduler.start()
    logger.info("Планировщик запущен")

    for job in scheduler.get_jobs():
        logger.debug("  - %s: %s", job.name, job.next_run_time)


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Остановить планировщик.

    Все периодические таймеры перестают срабатывать. Уже запущенные
    вызовы задач не прерываются.

    Args:
        scheduler: Экземпляр AsyncIOScheduler.
    """
    if not scheduler.running:
        logger.debug("Планировщик не запущен, пропускаем остановку")
        return

    scheduler.shutdown(wait=False)
    logger.info("Планировщик остановлен")


def get_default_scheduler() -> AsyncIOScheduler:
    """Получить общий планировщик, создав и запустив его при первом вызове.

    Используется расписаниями, которым не передан scheduler явно.
    Настройки берутся из окружения (TICKWORK_SCHEDULER__*).

    Планировщик привязан к event loop, в котором был запущен. Если хост
    закрыл тот loop и работает в новом (например, повторный asyncio.run()),
    старый экземпляр забывается без обращения к его loop, и создаётся новый.

    Должен вызываться из работающего event loop.

    Returns:
        Запущенный AsyncIOScheduler.

    Raises:
        ConfigurationError: Если настройки планировщика некорректны.
    """
    global _default_scheduler, _default_loop

    loop = asyncio.get_running_loop()

    if _default_scheduler is not None and _default_loop is not loop:
        logger.debug("Event loop сменился, общий планировщик создаётся заново")
        _default_scheduler = None
        _default_loop = None

    if _default_scheduler is None:
        _default_scheduler = create_scheduler(load_settings().scheduler)
        _default_loop = loop

    if not _default_scheduler.running:
        start_scheduler(_default_scheduler)

    return _default_scheduler


def shutdown_default_scheduler() -> None:
    """Остановить и забыть общий планировщик (если он был создан).

    Если event loop планировщика уже закрыт, планировщик просто забывается:
    его таймеры умерли вместе с loop.
    """
    global _default_scheduler, _default_loop

    loop_alive = _default_loop is not None and not _default_loop.is_closed()
    if _default_scheduler is not None and loop_alive:
        stop_scheduler(_default_scheduler)

    _default_scheduler = None
    _default_loop = None
