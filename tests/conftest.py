"""Общие фикстуры для всех тестов.

Этот файл содержит pytest-фикстуры, которые используются во всех тестах:
- Фейковые часы (управляемое "сейчас", запись всех ожиданий)
- Незапущенный планировщик APScheduler (таймеры ставятся, но не срабатывают)
- Запущенный планировщик для интеграционных тестов
- Изоляция настроек от переменных окружения и .env
"""

import os
from collections.abc import AsyncGenerator, Generator
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from tickwork.config.settings import load_settings
from tickwork.scheduler.clock import Clock
from tickwork.scheduler.runner import create_scheduler, shutdown_default_scheduler

# 2024-01-01 00:00:00 UTC, понедельник
MONDAY_MIDNIGHT_MS = 1_704_067_200_000


class FakeClock(Clock):
    """Управляемые часы для тестов.

    sleep() не ждёт, а сдвигает текущее время и запоминает длительность.
    today() возвращает заданную дату и запоминает запрошенный часовой пояс.
    """

    def __init__(self, now_ms: int = MONDAY_MIDNIGHT_MS, today: date | None = None) -> None:
        self.now = now_ms
        self.current_date = today or date(2024, 1, 1)
        self.sleeps: list[int] = []
        self.requested_timezones: list[str | None] = []

    def now_ms(self) -> int:
        return self.now

    async def sleep(self, ms: int) -> None:
        self.sleeps.append(ms)
        self.now += ms

    def today(self, timezone_name: str | None = None) -> date:
        self.requested_timezones.append(timezone_name)
        return self.current_date


@pytest.fixture
def fake_clock() -> FakeClock:
    """Создать фейковые часы, стоящие на понедельнике 2024-01-01 00:00 UTC."""
    return FakeClock()


@pytest.fixture
def idle_scheduler() -> AsyncIOScheduler:
    """Создать незапущенный планировщик.

    Задачи добавляются в очередь ожидания и никогда не срабатывают,
    поэтому тесты вызывают срабатывания таймера вручную.
    """
    return create_scheduler()


@pytest_asyncio.fixture
async def running_scheduler() -> AsyncGenerator[AsyncIOScheduler, None]:
    """Создать и запустить планировщик, остановить после теста."""
    scheduler = create_scheduler()
    scheduler.start()
    yield scheduler
    scheduler.shutdown(wait=False)


@pytest.fixture
def isolated_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Изолировать настройки от реального окружения.

    Удаляет переменные TICKWORK_*, переходит в пустую директорию (без .env)
    и сбрасывает кеш load_settings() до и после теста.
    """
    for key in list(os.environ):
        if key.startswith("TICKWORK_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)

    load_settings.cache_clear()
    yield
    load_settings.cache_clear()
    shutdown_default_scheduler()
