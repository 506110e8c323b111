"""Утилиты для работы с часовыми поясами.

Выравнивание расписаний (hourly_at, daily_at, weekly_at) считается
по шкале эпохи Unix и от часового пояса не зависит. Часовой пояс нужен
только там, где важна календарная дата: проверка дня месяца в monthly_at
и отображение времени в логах.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo


def get_timezone(timezone_name: str) -> ZoneInfo:
    """Получить объект часового пояса по имени.

    Args:
        timezone_name: Название часового пояса из базы IANA.
            Примеры: "Europe/Moscow", "UTC", "America/New_York".

    Returns:
        Объект ZoneInfo для указанного часового пояса.

    Raises:
        ZoneInfoNotFoundError: Если указанный часовой пояс не найден.
    """
    return ZoneInfo(timezone_name)


def now_in_timezone(timezone_name: str | None = None) -> datetime:
    """Получить текущее время в указанном часовом поясе.

    Args:
        timezone_name: Название часового пояса из базы IANA.
            Если None — используется локальное время системы.

    Returns:
        Текущее время. Для None — локальное время с tzinfo системы.
    """
    if timezone_name is None:
        return datetime.now().astimezone()
    return datetime.now(get_timezone(timezone_name))


def today_in_timezone(timezone_name: str | None = None) -> date:
    """Получить текущую календарную дату.

    Args:
        timezone_name: Название часового пояса из базы IANA.
            Если None — дата по локальному времени системы.

    Returns:
        Текущая дата.
    """
    return now_in_timezone(timezone_name).date()
