"""Политика обработки ошибок задач.

Одна и та же политика применяется во всех режимах расписания:
- kill_on_error — остановить расписание после первого неудачного вызова
- run_on_init — выполнить задачу сразу при создании расписания
- on_error — колбэк, получающий исключение каждого неудачного вызова

Ошибки задачи никогда не пробрасываются вызывающему коду. Без on_error
неудачный вызов проходит молча (пишется только DEBUG-лог).
"""

import inspect
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from tickwork.scheduler.models import InvocationResult
from tickwork.utils.logging import get_logger

logger = get_logger(__name__)

# Задача: функция без аргументов, обычная или async
Action = Callable[[], Any]


class ErrorPolicy(BaseModel):
    """Политика обработки ошибок одного расписания."""

    model_config = ConfigDict(frozen=True)

    kill_on_error: bool = False
    run_on_init: bool = False
    on_error: Callable[[Exception], Any] | None = None

    def with_run_on_init(self) -> "ErrorPolicy":
        """Копия политики с принудительным run_on_init=True."""
        return self.model_copy(update={"run_on_init": True})


DEFAULT_POLICY = ErrorPolicy()


async def invoke(action: Action) -> InvocationResult:
    """Выполнить задачу один раз.

    Если задача вернула awaitable (async-функция) — дожидается его.
    Возвращаемое значение задачи игнорируется.

    Args:
        action: Задача без аргументов.

    Returns:
        InvocationResult: успех или ошибка с исключением задачи.
    """
    try:
        result = action()
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        return InvocationResult(error=e)
    return InvocationResult()


async def report_failure(policy: ErrorPolicy, result: InvocationResult, name: str) -> None:
    """Сообщить о неудачном вызове через on_error.

    Исключение внутри самого on_error логируется и не останавливает
    расписание: это ошибка кода наблюдателя, а не задачи.

    Args:
        policy: Политика расписания.
        result: Неудачный результат вызова.
        name: Имя расписания (для логов).
    """
    logger.debug("Расписание '%s': задача завершилась ошибкой: %r", name, result.error)

    if policy.on_error is None or result.error is None:
        return

    try:
        callback_result = policy.on_error(result.error)
        if inspect.isawaitable(callback_result):
            await callback_result
    except Exception:
        logger.exception("Расписание '%s': ошибка в колбэке on_error", name)
