"""Определения доменных сущностей."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from notion_task_board.schema import DEFAULT_COLOR, DEFAULT_ICON, DEFAULT_TYPE


@dataclass(slots=True)
class Task:
    """Задача, собранная из страницы Notion."""

    id: str
    title: str
    status: str
    updated_at: str
    type: str = DEFAULT_TYPE
    color: str = DEFAULT_COLOR
    icon: str = DEFAULT_ICON

    def to_dict(self) -> Dict[str, str]:
        """Представление для клиента: ключ времени в camelCase."""
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "updatedAt": self.updated_at,
            "type": self.type,
            "color": self.color,
            "icon": self.icon,
        }


@dataclass(frozen=True, slots=True)
class TaskUpdate:
    """Частичное изменение задачи: заданные поля заменяются, остальные не трогаются."""

    title: Optional[str] = None
    status: Optional[str] = None

    def is_empty(self) -> bool:
        return self.title is None and self.status is None


__all__ = ["Task", "TaskUpdate"]
