"""Настройки библиотеки через переменные окружения.

В отличие от приложения, библиотека НЕ загружает настройки при импорте:
load_settings() вызывается лениво (общим планировщиком и хост-программой).

Переменные окружения:
    TICKWORK_LOGGING__LEVEL=DEBUG
    TICKWORK_LOGGING__TIMEZONE=Europe/Moscow
    TICKWORK_LOGGING__FILE=data/logs/app.log
    TICKWORK_SCHEDULER__MISFIRE_GRACE_TIME=30
"""

from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from tickwork.config.models import LoggingSettings, SchedulerSettings
from tickwork.core.exceptions import ConfigurationError

# Файл .env в текущей рабочей директории хост-программы (если есть)
ENV_FILE = Path(".env")

__all__ = [
    "LoggingSettings",
    "SchedulerSettings",
    "Settings",
    "load_settings",
]

# Сообщение по умолчанию для ошибок валидации
DEFAULT_ERROR_MESSAGE = "Ошибка конфигурации. Проверьте файл .env или переменные окружения"


class Settings(BaseSettings):
    """Настройки библиотеки.

    Настройки загружаются из двух источников (в порядке приоритета):
    1. Переменные окружения с префиксом TICKWORK_
    2. Файл .env (если существует)
    """

    model_config = SettingsConfigDict(
        env_prefix="TICKWORK_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    logging: LoggingSettings = LoggingSettings()
    scheduler: SchedulerSettings = SchedulerSettings()


def _format_validation_error(error: ValidationError) -> str:
    """Преобразовать ошибку Pydantic в понятное сообщение.

    Args:
        error: Ошибка валидации от Pydantic.

    Returns:
        Многострочное сообщение с перечнем полей и причин.
    """
    messages: list[str] = [DEFAULT_ERROR_MESSAGE]

    for err in error.errors():
        # ("logging", "level") -> TICKWORK_LOGGING__LEVEL
        field_path = "__".join(str(loc) for loc in err["loc"]).upper()
        messages.append(f"TICKWORK_{field_path}: {err['msg']}")

    return "\n".join(messages)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Загрузить настройки из переменных окружения.

    Результат кешируется; для перечитывания окружения вызовите
    load_settings.cache_clear().

    Returns:
        Объект Settings с загруженными настройками.

    Raises:
        ConfigurationError: Если настройки некорректны.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e
