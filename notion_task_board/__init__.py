"""Доска задач поверх базы данных Notion."""

__version__ = "0.1.0"
