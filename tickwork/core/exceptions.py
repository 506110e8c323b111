"""Централизованные исключения библиотеки.

Организация исключений:
- SchedulerError: базовый класс для всех ошибок tickwork
- InvalidScheduleError: некорректные параметры расписания
- ConfigurationError: некорректные настройки из переменных окружения

Ошибки самих задач (action) сюда не входят: они никогда не пробрасываются
вызывающему коду и доступны только через колбэк on_error.
"""

from typing import Any


class SchedulerError(Exception):
    """Базовое исключение для ошибок планировщика."""


class InvalidScheduleError(SchedulerError, ValueError):
    """Некорректные параметры расписания.

    Возникает синхронно при создании расписания, до того как что-либо
    запланировано: неверный формат времени, минута вне диапазона,
    неизвестный день недели и т.д.

    Attributes:
        field: Имя параметра с ошибкой.
        value: Переданное значение.
        reason: Описание проблемы.
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        """Создать исключение о некорректном расписании.

        Args:
            field: Имя параметра с ошибкой.
            value: Переданное значение.
            reason: Описание проблемы.
        """
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Некорректный параметр {field}={value!r}: {reason}")


class ConfigurationError(SchedulerError):
    """Ошибка конфигурации из переменных окружения или файла .env."""
