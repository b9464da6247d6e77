"""Бизнес-логика работы с задачами в базе Notion."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol, TypeVar

from notion_task_board.clients import NotionAPIError
from notion_task_board.errors import NotFoundError, SchemaMismatchError, UpstreamError, ValidationError
from notion_task_board.models import Task, TaskUpdate
from notion_task_board.schema import DEFAULT_STATUS, invalid_status_message, is_valid_status
from notion_task_board.services.task_mapper import TaskMapper

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

LAST_EDITED_DESC = [{"timestamp": "last_edited_time", "direction": "descending"}]

FAILURE_MESSAGES = {
    "list": "Failed to fetch tasks from Notion",
    "get": "Failed to fetch task from Notion",
    "create": "Failed to create task in Notion",
    "update": "Failed to update task in Notion",
    "verify-schema": "Failed to read database schema from Notion",
    "check-auth": "Failed to authenticate with Notion",
}


class RecordStore(Protocol):
    """Операции внешнего хранилища, которые нужны сервису."""

    def query_database(self, database_id: str, sorts: Optional[List[Dict]] = None) -> List[Dict]: ...

    def retrieve_database(self, database_id: str) -> Dict: ...

    def retrieve_page(self, page_id: str) -> Dict: ...

    def create_page(self, database_id: str, properties: Dict) -> Dict: ...

    def update_page(self, page_id: str, properties: Dict) -> Dict: ...

    def get_me(self) -> Dict: ...


class TaskSyncService:
    """Единственная точка чтения и записи задач в Notion.

    Каждая операция выполняет живой запрос к Notion: сервис не хранит
    задачи между вызовами. Ошибки Notion логируются с контекстом и
    поднимаются как ``UpstreamError`` без подробностей в сообщении.
    Проверка входных данных выполняется до любого запроса.
    """

    def __init__(
        self,
        client: RecordStore,
        database_id: str,
        task_mapper: Optional[TaskMapper] = None,
        *,
        verify_schema_on_first_call: bool = False,
    ) -> None:
        self._client = client
        self._database_id = database_id
        self._mapper = task_mapper or TaskMapper()
        self._schema_checked = not verify_schema_on_first_call

    # region public API
    def list_tasks(self) -> List[Task]:
        """Задачи базы, последние изменённые первыми."""
        self._ensure_schema()
        records = self._call(
            "list",
            lambda: self._client.query_database(self._database_id, sorts=LAST_EDITED_DESC),
        )
        tasks = []
        for record in records:
            if not self._mapper.is_full_record(record):
                LOGGER.debug("Пропуск результата без properties: %s", record)
                continue
            tasks.append(self._convert("list", record))
        return tasks

    def get_task(self, task_id: str) -> Task:
        self._ensure_schema()
        record = self._call("get", lambda: self._client.retrieve_page(task_id), task_id=task_id)
        return self._to_task("get", record, task_id)

    def create_task(self, title: str, status: Optional[str] = None) -> Task:
        title = self._clean_title(title)
        status = status if status is not None else DEFAULT_STATUS
        self._check_status(status)
        self._ensure_schema()
        properties = self._mapper.create_properties(title, status)
        LOGGER.info("Создание задачи %r со статусом %s", title, status)
        record = self._call("create", lambda: self._client.create_page(self._database_id, properties))
        return self._to_task("create", record)

    def update_task(self, task_id: str, update: TaskUpdate) -> Task:
        if update.is_empty():
            raise ValidationError("At least one field (title or status) must be provided")
        if update.title is not None:
            update = TaskUpdate(title=self._clean_title(update.title), status=update.status)
        if update.status is not None:
            self._check_status(update.status)
        self._ensure_schema()
        patch = self._mapper.update_to_patch(update)
        LOGGER.info("Обновление задачи %s: %s", task_id, ", ".join(sorted(patch)))
        record = self._call("update", lambda: self._client.update_page(task_id, patch), task_id=task_id)
        return self._to_task("update", record, task_id)

    def verify_schema(self) -> None:
        """Проверяет, что в базе есть свойства заголовка и статуса нужных типов."""
        database = self._call("verify-schema", lambda: self._client.retrieve_database(self._database_id))
        properties = database.get("properties") or {}
        names = self._mapper.property_names
        problems = []
        for name, expected_type in ((names.title, "title"), (names.status, "status")):
            prop = properties.get(name)
            if prop is None:
                problems.append(f"нет свойства {name!r}")
            elif prop.get("type") != expected_type:
                problems.append(f"свойство {name!r} имеет тип {prop.get('type')!r}, ожидался {expected_type!r}")
        if problems:
            available = ", ".join(sorted(properties)) or "нет"
            raise SchemaMismatchError(
                f"База {self._database_id} не соответствует схеме: {'; '.join(problems)}. "
                f"Доступные свойства: {available}"
            )
        self._schema_checked = True
        LOGGER.info("Схема базы %s проверена", self._database_id)

    def check_auth(self) -> Dict:
        """Проверяет токен запросом текущего пользователя Notion."""
        return self._call("check-auth", self._client.get_me)

    # endregion

    # region helpers
    def _ensure_schema(self) -> None:
        if not self._schema_checked:
            self.verify_schema()

    @staticmethod
    def _clean_title(title: object) -> str:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required and must be a non-empty string")
        return title.strip()

    @staticmethod
    def _check_status(status: object) -> None:
        if not is_valid_status(status):
            raise ValidationError(invalid_status_message(status))

    def _call(self, operation: str, func: Callable[[], T], *, task_id: Optional[str] = None) -> T:
        try:
            return func()
        except NotionAPIError as exc:
            if task_id is not None and exc.is_not_found:
                LOGGER.warning("Задача %s не найдена в Notion (операция %s)", task_id, operation)
                raise NotFoundError(task_id) from exc
            LOGGER.error(
                "Ошибка Notion при операции %s (база %s, задача %s): %s",
                operation,
                self._database_id,
                task_id or "-",
                exc,
            )
            raise UpstreamError(FAILURE_MESSAGES[operation]) from exc

    def _to_task(self, operation: str, record: Dict, task_id: Optional[str] = None) -> Task:
        if not self._mapper.is_full_record(record):
            LOGGER.error("Notion вернул страницу без properties при операции %s (задача %s)", operation, task_id or "-")
            raise UpstreamError(FAILURE_MESSAGES[operation])
        return self._convert(operation, record, task_id)

    def _convert(self, operation: str, record: Dict, task_id: Optional[str] = None) -> Task:
        try:
            return self._mapper.record_to_task(record)
        except (AttributeError, TypeError, KeyError, IndexError) as exc:
            LOGGER.error(
                "Некорректная страница Notion при операции %s (задача %s): %r", operation, task_id or "-", exc
            )
            raise UpstreamError(FAILURE_MESSAGES[operation]) from exc

    # endregion


__all__ = ["TaskSyncService", "RecordStore", "LAST_EDITED_DESC"]
