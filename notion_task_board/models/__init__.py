"""Доменные модели доски задач."""

from .entities import Task, TaskUpdate

__all__ = [
    "Task",
    "TaskUpdate",
]
