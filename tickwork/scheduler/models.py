"""Модели расписаний.

- Period: период повторения (час, день, неделя) в миллисекундах
- Schedule: период + смещение внутри периода, в которое нужен запуск
- InvocationResult: результат одного вызова задачи (успех или ошибка)
"""

from dataclasses import dataclass
from enum import IntEnum

from tickwork.config.constants import DAY, HOUR, WEEK


class Period(IntEnum):
    """Период повторения в миллисекундах."""

    HOUR = HOUR
    DAY = DAY
    WEEK = WEEK


@dataclass(frozen=True)
class Schedule:
    """Календарное расписание: период и смещение внутри периода.

    Смещение отсчитывается от границы периода на шкале эпохи Unix
    (а не от полуночи в каком-либо часовом поясе).

    Attributes:
        period: Период повторения.
        offset_ms: Смещение от начала периода, 0 <= offset_ms < period.
    """

    period: Period
    offset_ms: int

    def __post_init__(self) -> None:
        if not 0 <= self.offset_ms < self.period:
            msg = f"offset_ms={self.offset_ms} вне периода {self.period.name}"
            raise ValueError(msg)


@dataclass(frozen=True)
class InvocationResult:
    """Результат одного вызова задачи.

    Attributes:
        error: Исключение, которым завершилась задача (None при успехе).
    """

    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        """Проверить, завершилась ли задача успешно."""
        return self.error is None

    @property
    def failed(self) -> bool:
        """Проверить, завершилась ли задача ошибкой."""
        return self.error is not None
