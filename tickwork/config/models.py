"""Модели настроек библиотеки.

Этот модуль содержит только классы настроек (Pydantic модели),
БЕЗ загрузки из переменных окружения. Это позволяет:
- Импортировать классы в тестах без побочных эффектов
- Создавать экземпляры с тестовыми данными
- Передавать настройки в create_scheduler() и setup_logging() явно

Для загрузки настроек из окружения используйте модуль settings.py.
"""

from pathlib import Path
from zoneinfo import ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from tickwork.utils.timezone import get_timezone

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Настройки логирования хост-программы."""

    level: str = "INFO"

    # Часовой пояс для отображения времени в логах.
    # Формат: строка из базы IANA (Europe/Moscow, UTC, America/New_York).
    timezone: str = "UTC"

    # Путь к файлу лога с ротацией (опционально).
    # Если не указан — логи пишутся только в консоль.
    file: Path | None = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Проверить и нормализовать уровень логирования."""
        level = value.upper()
        if level not in LOG_LEVELS:
            msg = f"Неизвестный уровень логирования: {value}"
            raise ValueError(msg)
        return level

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Проверить, что часовой пояс существует в базе IANA."""
        try:
            get_timezone(value)
        except ZoneInfoNotFoundError as e:
            msg = f"Неизвестный часовой пояс: {value}"
            raise ValueError(msg) from e
        return value


class SchedulerSettings(BaseModel):
    """Настройки бэкенда планировщика (APScheduler).

    Влияют только на общий планировщик, создаваемый через
    get_default_scheduler(). Сами функции every()/daily_at()
    переменные окружения не читают.
    """

    # Часовой пояс APScheduler. На интервальные задачи не влияет,
    # но используется планировщиком для отображения next_run_time.
    timezone: str = "UTC"

    # Сколько секунд задача может опоздать и всё ещё выполниться.
    # None — выполнять всегда, даже с большим опозданием.
    # Пропущенные запуски не накапливаются (coalesce), догоняющих
    # запусков после долгой паузы процесса не бывает.
    misfire_grace_time: int | None = Field(default=None, ge=1)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Проверить, что часовой пояс существует в базе IANA."""
        try:
            get_timezone(value)
        except ZoneInfoNotFoundError as e:
            msg = f"Неизвестный часовой пояс: {value}"
            raise ValueError(msg) from e
        return value
