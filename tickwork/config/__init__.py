"""Модуль конфигурации.

Для загрузки настроек из окружения используйте:
    from tickwork.config.settings import load_settings

Для использования только классов настроек (без чтения окружения):
    from tickwork.config.models import SchedulerSettings
"""
