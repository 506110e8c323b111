"""Вычисление задержки до ближайшего календарного момента.

Все расчёты ведутся в миллисекундах на шкале эпохи Unix: граница дня —
это полночь UTC, граница недели — начало четверга 00:00 UTC
(1 января 1970 года был четвергом). Часовой пояс здесь не участвует.

Пример:
    >>> schedule = daily_schedule("05:25")
    >>> delay_until_aligned(schedule.period, schedule.offset_ms, now_ms)
"""

import re

from tickwork.config.constants import DAY, DAY_NAMES, EPOCH_WEEKDAY_SHIFT, HOUR, MINUTE
from tickwork.core.exceptions import InvalidScheduleError
from tickwork.scheduler.models import Period, Schedule

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{1,2})\s*$")


def delay_until_aligned(period_ms: int, offset_ms: int, now_ms: int) -> int:
    """Вычислить задержку до ближайшего момента offset_ms внутри периода.

    Args:
        period_ms: Длина периода (час, день, неделя).
        offset_ms: Целевое смещение от начала периода.
        now_ms: Текущее время в миллисекундах от эпохи.

    Returns:
        Задержка в миллисекундах в диапазоне [0, period_ms). Если целевой
        момент в текущем периоде уже прошёл, отсчёт идёт до того же
        момента следующего периода. Ровно в целевой момент задержка — 0.

    Сравнение нестрогое (<=): при строгом ровно в целевой момент
    получился бы целый период вместо немедленного запуска.
    """
    ms_passed = (now_ms // period_ms) * period_ms
    ms_into = now_ms - ms_passed

    if ms_into <= offset_ms:
        return offset_ms - ms_into
    return period_ms + offset_ms - ms_into


def parse_time(time: str) -> tuple[int, int]:
    """Разобрать строку времени "HH:MM".

    Args:
        time: Время суток, например "05:25" или "7:53".

    Returns:
        Кортеж (часы, минуты).

    Raises:
        InvalidScheduleError: Если строка не в формате HH:MM или значения
            вне диапазона 00:00–23:59.
    """
    match = _TIME_RE.match(time) if isinstance(time, str) else None
    if match is None:
        raise InvalidScheduleError("time", time, "ожидается строка в формате HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidScheduleError("time", time, "время вне диапазона 00:00–23:59")

    return hour, minute


def normalize_weekday(day: str | int) -> int:
    """Перевести день недели в номер дня от начала недели эпохи.

    Args:
        day: Название дня ("monday", регистр не важен) или номер 0–6,
            где 0 — воскресенье.

    Returns:
        Номер дня внутри недели эпохи: (day + 3) % 7. Четверг → 0.

    Raises:
        InvalidScheduleError: Для неизвестного названия или номера вне 0–6.
    """
    if isinstance(day, str):
        name = day.strip().lower()
        if name not in DAY_NAMES:
            raise InvalidScheduleError("day", day, "неизвестный день недели")
        index = DAY_NAMES.index(name)
    elif isinstance(day, int) and not isinstance(day, bool):
        if not 0 <= day < len(DAY_NAMES):
            raise InvalidScheduleError("day", day, "номер дня должен быть от 0 до 6")
        index = day
    else:
        raise InvalidScheduleError("day", day, "ожидается название дня или номер 0–6")

    return (index + EPOCH_WEEKDAY_SHIFT) % len(DAY_NAMES)


def hourly_schedule(minute: int) -> Schedule:
    """Расписание "каждый час в minute минут"."""
    if isinstance(minute, bool) or not isinstance(minute, int) or not 0 <= minute < 60:
        raise InvalidScheduleError("minute", minute, "ожидается целое число от 0 до 59")
    return Schedule(Period.HOUR, minute * MINUTE)


def daily_schedule(time: str) -> Schedule:
    """Расписание "каждый день в HH:MM" (по шкале эпохи, т.е. UTC)."""
    hour, minute = parse_time(time)
    return Schedule(Period.DAY, hour * HOUR + minute * MINUTE)


def weekly_schedule(day: str | int, time: str) -> Schedule:
    """Расписание "каждую неделю в day в HH:MM" (по шкале эпохи, т.е. UTC)."""
    weekday = normalize_weekday(day)
    hour, minute = parse_time(time)
    return Schedule(Period.WEEK, weekday * DAY + hour * HOUR + minute * MINUTE)
