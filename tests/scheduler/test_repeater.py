"""Тесты для scheduler.repeater — периодический запуск с фиксированным интервалом.

Модуль тестирует:
- every() / hourly() / daily() / weekly() — постановка таймера
- RunningSchedule._tick() — политика ошибок на каждом срабатывании
- run_on_init — немедленный вызов параллельно с таймером
- kill_on_error — снятие таймера после ошибки
- Перекрывающиеся вызовы медленной задачи

Срабатывания таймера вызываются вручную через _tick()/_fire() на
незапущенном планировщике; один интеграционный тест использует
настоящий запущенный AsyncIOScheduler.
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, Mock

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from tickwork.config.constants import DAY, HOUR, WEEK
from tickwork.core.exceptions import InvalidScheduleError
from tickwork.scheduler.policy import ErrorPolicy
from tickwork.scheduler.repeater import RunningSchedule, daily, every, hourly, weekly

# ==============================================================================
# ПОСТАНОВКА ТАЙМЕРА
# ==============================================================================


@pytest.mark.asyncio
async def test_every_arms_single_interval_job(idle_scheduler: AsyncIOScheduler) -> None:
    """Проверить, что every() ставит ровно одну интервальную задачу."""
    # Act
    running = every(1500, Mock(), scheduler=idle_scheduler, name="sync")

    # Assert
    jobs = idle_scheduler.get_jobs()
    assert len(jobs) == 1
    assert jobs[0].name == "sync"
    assert jobs[0].trigger.interval == timedelta(milliseconds=1500)
    assert running.active is True


@pytest.mark.parametrize("interval", [0, -5, 1.5, True, "1000"])
def test_every_rejects_invalid_interval(interval: object) -> None:
    """Проверить, что неположительный или нецелый интервал отклоняется."""
    with pytest.raises(InvalidScheduleError):
        RunningSchedule(interval, Mock())  # type: ignore[arg-type]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("wrapper", "interval"),
    [(hourly, HOUR), (daily, DAY), (weekly, WEEK)],
)
async def test_period_wrappers_use_period_constants(
    idle_scheduler: AsyncIOScheduler,
    wrapper: object,
    interval: int,
) -> None:
    """Проверить, что hourly/daily/weekly передают константу периода и политику."""
    policy = ErrorPolicy(kill_on_error=True)

    running = wrapper(Mock(), policy, scheduler=idle_scheduler)  # type: ignore[operator]

    assert running.interval_ms == interval
    assert running.policy is policy
    assert idle_scheduler.get_jobs()[0].trigger.interval == timedelta(milliseconds=interval)


@pytest.mark.asyncio
async def test_without_run_on_init_nothing_runs_immediately(
    idle_scheduler: AsyncIOScheduler,
) -> None:
    """Проверить, что без run_on_init задача не вызывается до первого срабатывания."""
    action = Mock()

    running = every(1000, action, scheduler=idle_scheduler)
    await asyncio.sleep(0)

    assert running.initial_run is None
    action.assert_not_called()


# ==============================================================================
# ПОЛИТИКА ОШИБОК НА СРАБАТЫВАНИЯХ
# ==============================================================================


@pytest.mark.asyncio
async def test_failing_ticks_without_kill_keep_schedule_active(
    idle_scheduler: AsyncIOScheduler,
) -> None:
    """Проверить, что при N ошибках on_error вызывается N раз и таймер остаётся."""
    # Arrange
    on_error = Mock()
    action = Mock(side_effect=RuntimeError("boom"))
    running = every(1000, action, ErrorPolicy(on_error=on_error), scheduler=idle_scheduler)

    # Act
    for _ in range(5):
        await running._tick()

    # Assert
    assert on_error.call_count == 5
    assert running.failures == 5
    assert running.invocations == 5
    assert running.active is True
    assert len(idle_scheduler.get_jobs()) == 1


@pytest.mark.asyncio
async def test_failing_tick_with_kill_cancels_timer(idle_scheduler: AsyncIOScheduler) -> None:
    """Проверить, что при kill_on_error ошибка снимает таймер и это последний вызов."""
    # Arrange
    on_error = Mock()
    action = Mock(side_effect=RuntimeError("boom"))
    running = every(
        1000,
        action,
        ErrorPolicy(kill_on_error=True, on_error=on_error),
        scheduler=idle_scheduler,
    )

    # Act
    await running._tick()
    await running._tick()

    # Assert
    action.assert_called_once()
    on_error.assert_called_once()
    assert running.active is False
    assert idle_scheduler.get_jobs() == []


@pytest.mark.asyncio
async def test_successful_ticks_do_not_call_on_error(idle_scheduler: AsyncIOScheduler) -> None:
    """Проверить, что успешные вызовы не трогают on_error."""
    on_error = Mock()
    action = AsyncMock()
    running = every(
        1000, action, ErrorPolicy(kill_on_error=True, on_error=on_error), scheduler=idle_scheduler
    )

    await running._tick()
    await running._tick()

    assert action.await_count == 2
    on_error.assert_not_called()
    assert running.active is True


@pytest.mark.asyncio
async def test_failing_tick_without_on_error_is_swallowed(
    idle_scheduler: AsyncIOScheduler,
) -> None:
    """Проверить, что без on_error ошибка задачи не выходит наружу."""
    running = every(1000, Mock(side_effect=RuntimeError("boom")), scheduler=idle_scheduler)

    await running._tick()

    assert running.failures == 1
    assert running.active is True


# ==============================================================================
# RUN_ON_INIT
# ==============================================================================


@pytest.mark.asyncio
async def test_run_on_init_runs_concurrently_with_armed_timer(
    idle_scheduler: AsyncIOScheduler,
) -> None:
    """Проверить, что немедленный вызов идёт, когда таймер уже взведён."""
    # Arrange
    jobs_seen: list[int] = []

    def action() -> None:
        jobs_seen.append(len(idle_scheduler.get_jobs()))

    # Act
    running = every(1000, action, ErrorPolicy(run_on_init=True), scheduler=idle_scheduler)
    assert running.initial_run is not None
    await running.initial_run

    # Assert
    assert jobs_seen == [1]
    assert running.invocations == 1


@pytest.mark.asyncio
async def test_run_on_init_does_not_block_start(idle_scheduler: AsyncIOScheduler) -> None:
    """Проверить, что start() не ждёт завершения немедленного вызова."""
    # Arrange
    gate = asyncio.Event()

    async def slow() -> None:
        await gate.wait()

    # Act
    running = every(1000, slow, ErrorPolicy(run_on_init=True), scheduler=idle_scheduler)
    await asyncio.sleep(0)

    # Assert
    assert running.initial_run is not None
    assert not running.initial_run.done()
    assert running.active is True

    gate.set()
    await running.initial_run


@pytest.mark.asyncio
async def test_init_failure_with_kill_cancels_on_next_tick(
    idle_scheduler: AsyncIOScheduler,
) -> None:
    """Проверить, что после ошибки немедленного вызова следующий тик снимает таймер."""
    # Arrange
    on_error = Mock()
    action = Mock(side_effect=RuntimeError("boom"))
    running = every(
        1000,
        action,
        ErrorPolicy(kill_on_error=True, run_on_init=True, on_error=on_error),
        scheduler=idle_scheduler,
    )
    assert running.initial_run is not None
    await running.initial_run

    # Act
    await running._tick()

    # Assert
    assert running.init_failed is True
    action.assert_called_once()
    on_error.assert_called_once()
    assert running.active is False
    assert idle_scheduler.get_jobs() == []


@pytest.mark.asyncio
async def test_init_failure_without_kill_keeps_ticking(idle_scheduler: AsyncIOScheduler) -> None:
    """Проверить, что без kill_on_error после ошибки немедленного вызова тики продолжаются."""
    on_error = Mock()
    action = Mock(side_effect=[RuntimeError("boom"), None, None])
    running = every(
        1000,
        action,
        ErrorPolicy(run_on_init=True, on_error=on_error),
        scheduler=idle_scheduler,
    )
    assert running.initial_run is not None
    await running.initial_run

    await running._tick()
    await running._tick()

    assert action.call_count == 3
    on_error.assert_called_once()
    assert running.active is True


# ==============================================================================
# ОТМЕНА И ПЕРЕКРЫТИЕ ВЫЗОВОВ
# ==============================================================================


@pytest.mark.asyncio
async def test_cancel_is_idempotent(idle_scheduler: AsyncIOScheduler) -> None:
    """Проверить, что повторная отмена безопасна и тики после отмены не вызывают задачу."""
    action = Mock()
    running = every(1000, action, scheduler=idle_scheduler)

    running.cancel()
    running.cancel()
    await running._tick()

    assert running.active is False
    assert running.next_run_time is None
    action.assert_not_called()


@pytest.mark.asyncio
async def test_slow_action_does_not_block_next_tick(idle_scheduler: AsyncIOScheduler) -> None:
    """Проверить, что срабатывания не ждут завершения предыдущего вызова."""
    # Arrange
    gate = asyncio.Event()
    in_flight = 0

    async def slow() -> None:
        nonlocal in_flight
        in_flight += 1
        await gate.wait()

    running = every(1000, slow, scheduler=idle_scheduler)

    # Act
    await running._fire()
    await running._fire()
    await asyncio.sleep(0)

    # Assert
    assert in_flight == 2

    gate.set()
    await asyncio.gather(*running._tasks)


@pytest.mark.asyncio
async def test_running_scheduler_fires_until_cancelled(
    running_scheduler: AsyncIOScheduler,
) -> None:
    """Проверить на настоящем планировщике: таймер срабатывает и останавливается отменой."""
    # Arrange
    calls = 0

    def action() -> None:
        nonlocal calls
        calls += 1

    # Act
    running = every(50, action, scheduler=running_scheduler)
    await asyncio.sleep(0.4)
    running.cancel()
    calls_at_cancel = calls
    await asyncio.sleep(0.2)

    # Assert
    assert calls_at_cancel >= 2
    assert calls == calls_at_cancel
    assert running_scheduler.get_jobs() == []
