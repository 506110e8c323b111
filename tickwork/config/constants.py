"""Константы библиотеки."""

# ==============================================================================
# ДЛИТЕЛЬНОСТИ (в миллисекундах)
# ==============================================================================

SECOND = 1000
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY

# ==============================================================================
# ДНИ НЕДЕЛИ
# ==============================================================================

# Порядок фиксирован: индекс в списке — номер дня ("sunday" = 0)
DAY_NAMES: tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

# 1 января 1970 года был четвергом (индекс 4).
# Сдвиг на 3 по модулю 7 переводит номер дня в смещение от начала
# недели эпохи: четверг → 0, воскресенье → 3.
EPOCH_WEEKDAY_SHIFT = 3

# Максимальный день месяца для monthly_at
MAX_DAY_OF_MONTH = 31
