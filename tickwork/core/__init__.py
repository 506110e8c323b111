"""Ядро библиотеки: общие исключения."""
