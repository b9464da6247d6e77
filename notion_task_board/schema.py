"""Соответствие свойств базы Notion полям задачи."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# Имена свойств должны совпадать с колонками базы Notion символ в символ
TITLE_PROPERTY = "标题"
STATUS_PROPERTY = "状态"

# Группы статусов Notion (待办/进行中/已完成) не записываются, только сами значения
VALID_STATUS_VALUES: Tuple[str, ...] = (
    "待跟进",
    "计划中",
    "丢弃",
    "搁置",
    "已解决",
)

DEFAULT_STATUS = VALID_STATUS_VALUES[0]
FALLBACK_TITLE = "Untitled"
DEFAULT_TYPE = "任务"
DEFAULT_COLOR = "#3b82f6"
DEFAULT_ICON = "check_circle"


@dataclass(frozen=True, slots=True)
class PropertyNames:
    """Имена свойств базы, из которых читаются заголовок и статус."""

    title: str = TITLE_PROPERTY
    status: str = STATUS_PROPERTY


def is_valid_status(candidate: object) -> bool:
    """Проверяет, что значение ровно одно из допустимых статусов."""
    return isinstance(candidate, str) and candidate in VALID_STATUS_VALUES


def invalid_status_message(value: object) -> str:
    return f"Invalid status value: {value}. Must be one of: {', '.join(VALID_STATUS_VALUES)}"


__all__ = [
    "TITLE_PROPERTY",
    "STATUS_PROPERTY",
    "VALID_STATUS_VALUES",
    "DEFAULT_STATUS",
    "FALLBACK_TITLE",
    "DEFAULT_TYPE",
    "DEFAULT_COLOR",
    "DEFAULT_ICON",
    "PropertyNames",
    "is_valid_status",
    "invalid_status_message",
]
