"""Тесты для config.settings и config.models.

Проверяет:
- Значения по умолчанию
- Загрузку из переменных окружения TICKWORK_* и файла .env
- Понятную ConfigurationError при некорректных значениях
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tickwork.config.models import LoggingSettings, SchedulerSettings
from tickwork.config.settings import load_settings
from tickwork.core.exceptions import ConfigurationError

pytestmark = pytest.mark.usefixtures("isolated_settings")


class TestLoadSettings:
    """Тесты для load_settings()."""

    def test_defaults(self) -> None:
        """Проверить значения по умолчанию без окружения."""
        settings = load_settings()

        assert settings.logging.level == "INFO"
        assert settings.logging.timezone == "UTC"
        assert settings.logging.file is None
        assert settings.scheduler.misfire_grace_time is None

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Проверить чтение вложенных переменных окружения."""
        # Arrange
        monkeypatch.setenv("TICKWORK_LOGGING__LEVEL", "debug")
        monkeypatch.setenv("TICKWORK_LOGGING__TIMEZONE", "Europe/Moscow")
        monkeypatch.setenv("TICKWORK_SCHEDULER__MISFIRE_GRACE_TIME", "15")

        # Act
        settings = load_settings()

        # Assert
        assert settings.logging.level == "DEBUG"
        assert settings.logging.timezone == "Europe/Moscow"
        assert settings.scheduler.misfire_grace_time == 15

    def test_env_file(self, tmp_path: Path) -> None:
        """Проверить чтение файла .env из текущей директории."""
        (tmp_path / ".env").write_text("TICKWORK_LOGGING__LEVEL=WARNING\n", encoding="utf-8")

        assert load_settings().logging.level == "WARNING"

    def test_result_is_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Проверить, что настройки кешируются до cache_clear()."""
        first = load_settings()
        monkeypatch.setenv("TICKWORK_LOGGING__LEVEL", "ERROR")

        assert load_settings() is first

        load_settings.cache_clear()
        assert load_settings().logging.level == "ERROR"

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("TICKWORK_LOGGING__LEVEL", "LOUD"),
            ("TICKWORK_LOGGING__TIMEZONE", "Mars/Olympus"),
            ("TICKWORK_SCHEDULER__MISFIRE_GRACE_TIME", "0"),
        ],
    )
    def test_invalid_value_raises_configuration_error(
        self, monkeypatch: pytest.MonkeyPatch, key: str, value: str
    ) -> None:
        """Проверить, что некорректное значение даёт ConfigurationError с именем переменной."""
        monkeypatch.setenv(key, value)

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()

        assert key in str(exc_info.value)


class TestModels:
    """Тесты моделей настроек без окружения."""

    def test_logging_level_is_normalized(self) -> None:
        """Проверить, что уровень логирования приводится к верхнему регистру."""
        assert LoggingSettings(level="warning").level == "WARNING"

    def test_scheduler_timezone_must_exist(self) -> None:
        """Проверить, что неизвестный часовой пояс отклоняется."""
        with pytest.raises(ValidationError):
            SchedulerSettings(timezone="Nowhere/City")
