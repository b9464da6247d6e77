"""Иерархия ошибок слоя синхронизации задач."""
from __future__ import annotations


class TaskBoardError(Exception):
    """Базовая ошибка приложения."""


class ValidationError(TaskBoardError):
    """Переданные данные нарушают локальные правила (пустой заголовок, неизвестный статус)."""


class UpstreamError(TaskBoardError):
    """Обращение к Notion завершилось ошибкой. Подробности только в логе."""


class NotFoundError(TaskBoardError):
    """Страница с указанным идентификатором в Notion не найдена."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class SchemaMismatchError(TaskBoardError):
    """Свойства базы Notion не соответствуют ожидаемой схеме."""


__all__ = [
    "TaskBoardError",
    "ValidationError",
    "UpstreamError",
    "NotFoundError",
    "SchemaMismatchError",
]
