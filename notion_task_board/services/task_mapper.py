"""Маппинг страниц Notion в задачи и обратно."""
from __future__ import annotations

from typing import Dict, Mapping, Optional

from notion_task_board.models import Task, TaskUpdate
from notion_task_board.schema import (
    DEFAULT_COLOR,
    DEFAULT_ICON,
    DEFAULT_STATUS,
    DEFAULT_TYPE,
    FALLBACK_TITLE,
    PropertyNames,
)


class TaskMapper:
    """Конвертация данных между Notion API и внутренними моделями."""

    def __init__(self, property_names: Optional[PropertyNames] = None) -> None:
        self._names = property_names or PropertyNames()

    @property
    def property_names(self) -> PropertyNames:
        return self._names

    @staticmethod
    def is_full_record(record: object) -> bool:
        """Полная страница несёт словарь properties; ссылочные результаты его не имеют."""
        return isinstance(record, Mapping) and isinstance(record.get("properties"), Mapping)

    def record_to_task(self, record: Mapping) -> Task:
        properties = record.get("properties") or {}
        return Task(
            id=str(record["id"]),
            title=self._extract_title(properties.get(self._names.title)),
            status=self._extract_status(properties.get(self._names.status)),
            updated_at=record.get("last_edited_time"),
            type=DEFAULT_TYPE,
            color=DEFAULT_COLOR,
            icon=DEFAULT_ICON,
        )

    @staticmethod
    def _extract_title(prop: Optional[Mapping]) -> str:
        if not isinstance(prop, Mapping) or prop.get("type", "title") != "title":
            return FALLBACK_TITLE
        segments = prop.get("title") or []
        if not segments:
            return FALLBACK_TITLE
        first = segments[0]
        # в ответах Notion есть plain_text, в патче только text.content
        text = first.get("plain_text")
        if text is None:
            text = (first.get("text") or {}).get("content")
        return text if text is not None else FALLBACK_TITLE

    @staticmethod
    def _extract_status(prop: Optional[Mapping]) -> str:
        if not isinstance(prop, Mapping) or prop.get("type", "status") != "status":
            return DEFAULT_STATUS
        status = prop.get("status") or {}
        return status.get("name") or DEFAULT_STATUS

    @staticmethod
    def _title_property(title: str) -> Dict:
        return {"title": [{"text": {"content": title}}]}

    @staticmethod
    def _status_property(status: str) -> Dict:
        return {"status": {"name": status}}

    def update_to_patch(self, update: TaskUpdate) -> Dict[str, Dict]:
        """Свойства для PATCH: только поля, заданные в изменении."""
        patch: Dict[str, Dict] = {}
        if update.title is not None:
            patch[self._names.title] = self._title_property(update.title)
        if update.status is not None:
            patch[self._names.status] = self._status_property(update.status)
        return patch

    def create_properties(self, title: str, status: str) -> Dict[str, Dict]:
        return {
            self._names.title: self._title_property(title),
            self._names.status: self._status_property(status),
        }


__all__ = ["TaskMapper"]
