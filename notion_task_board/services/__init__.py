"""Сервисный слой приложения."""

from .sync import TaskSyncService
from .task_filter import filter_tasks
from .task_mapper import TaskMapper

__all__ = ["TaskSyncService", "TaskMapper", "filter_tasks"]
