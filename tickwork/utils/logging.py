"""Настройка логирования.

Библиотека пишет логи через стандартный logging и сама обработчики
не настраивает. setup_logging() — для хост-программы, которой нужен
готовый вывод в том же формате:

1. Консоль (stdout) — с цветной подсветкой уровней, если это терминал
2. Файл с ротацией — если указан путь (опционально)

Компактный формат логов:
    25-01-07 21:55:46 | INFO | scheduler.repeater | Сообщение
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from typing_extensions import override

from tickwork.utils.timezone import get_timezone

if TYPE_CHECKING:
    from tickwork.config.models import LoggingSettings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%y-%m-%d %H:%M:%S"  # 25-01-07 вместо 2025-01-07

# Префикс, который убирается из имени логгера в консоли
PACKAGE_PREFIX = "tickwork."


class AnsiColors:
    """ANSI escape-коды для цветного вывода в терминале."""

    RESET = "\033[0m"

    DEBUG = "\033[36m"  # Голубой (cyan)
    INFO = "\033[32m"  # Зелёный (green)
    WARNING = "\033[33m"  # Жёлтый (yellow)
    ERROR = "\033[31m"  # Красный (red)
    CRITICAL = "\033[35m"  # Пурпурный (magenta)


# Соответствие уровней логирования и цветов
LEVEL_COLORS: dict[str, str] = {
    "DEBUG": AnsiColors.DEBUG,
    "INFO": AnsiColors.INFO,
    "WARNING": AnsiColors.WARNING,
    "ERROR": AnsiColors.ERROR,
    "CRITICAL": AnsiColors.CRITICAL,
}


class TimezoneFormatter(logging.Formatter):
    """Форматтер логов с поддержкой часового пояса.

    Стандартный logging.Formatter использует локальное время системы.
    Этот форматтер позволяет указать любой часовой пояс для отображения.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        timezone_name: str = "UTC",
    ) -> None:
        """Инициализировать форматтер.

        Args:
            fmt: Формат строки лога.
            datefmt: Формат даты/времени.
            timezone_name: Название часового пояса из базы IANA.
        """
        super().__init__(fmt, datefmt)
        self.timezone = get_timezone(timezone_name)

    @override
    def formatTime(
        self,
        record: logging.LogRecord,
        datefmt: str | None = None,
    ) -> str:
        """Отформатировать время записи в настроенном часовом поясе."""
        dt = datetime.fromtimestamp(record.created, tz=self.timezone)

        if datefmt:
            return dt.strftime(datefmt)
        return dt.strftime(self.default_time_format)


class ColoredFormatter(TimezoneFormatter):
    """Форматтер логов с цветной подсветкой уровней.

    Особенности:
    - Убран префикс "tickwork." из имени логгера
    - Уровни логирования выделяются цветом (если use_colors=True)

    В файловом логе цвета не нужны — используйте обычный TimezoneFormatter.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        timezone_name: str = "UTC",
        use_colors: bool = True,
    ) -> None:
        """Инициализировать форматтер с цветами.

        Args:
            fmt: Формат строки лога.
            datefmt: Формат даты/времени.
            timezone_name: Название часового пояса из базы IANA.
            use_colors: Использовать ли цветную подсветку.
        """
        super().__init__(fmt, datefmt, timezone_name)
        self.use_colors = use_colors

    @override
    def format(self, record: logging.LogRecord) -> str:
        """Отформатировать запись лога с цветной подсветкой."""
        # tickwork.scheduler.repeater → scheduler.repeater
        original_name = record.name
        record.name = record.name.removeprefix(PACKAGE_PREFIX)

        formatted = super().format(record)

        # Восстанавливаем оригинальное имя (для других handler-ов)
        record.name = original_name

        if not self.use_colors:
            return formatted

        level_color = LEVEL_COLORS.get(record.levelname, "")
        if level_color:
            # "| INFO |" → "| \033[32mINFO\033[0m |"
            colored_level = f"{level_color}{record.levelname}{AnsiColors.RESET}"
            formatted = formatted.replace(
                f"| {record.levelname} |",
                f"| {colored_level} |",
            )

        return formatted


def _should_use_colors() -> bool:
    """Определить, поддерживает ли терминал цвета.

    Проверяет:
    1. Переменную окружения NO_COLOR (стандарт https://no-color.org/)
    2. Является ли stdout терминалом (tty)

    Returns:
        True если можно использовать цвета.
    """
    if os.environ.get("NO_COLOR"):
        return False

    return sys.stdout.isatty()


def setup_logging(
    level: str = "INFO",
    timezone_name: str = "UTC",
    log_file: Path | None = None,
) -> None:
    """Настроить логирование хост-программы.

    Логи выводятся в консоль (с цветной подсветкой) и, если указан
    log_file, сохраняются в файл с ротацией (5 МБ, 3 резервных копии).

    Args:
        level: Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        timezone_name: Часовой пояс для отображения времени в логах.
        log_file: Путь к файлу лога (опционально).
    """
    console_formatter = ColoredFormatter(
        LOG_FORMAT,
        datefmt=DATE_FORMAT,
        timezone_name=timezone_name,
        use_colors=_should_use_colors(),
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 МБ
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            TimezoneFormatter(LOG_FORMAT, datefmt=DATE_FORMAT, timezone_name=timezone_name)
        )
        root_logger.addHandler(file_handler)

    # APScheduler пишет о каждом запуске задачи на уровне INFO — это шум
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def setup_logging_from_settings(settings: "LoggingSettings") -> None:
    """Настроить логирование по объекту настроек.

    Args:
        settings: Настройки логирования (например, load_settings().logging).
    """
    setup_logging(
        level=settings.level,
        timezone_name=settings.timezone,
        log_file=settings.file,
    )


def get_logger(name: str) -> logging.Logger:
    """Получить логгер с указанным именем.

    Args:
        name: Имя логгера (обычно __name__).

    Returns:
        Экземпляр логгера.
    """
    return logging.getLogger(name)
