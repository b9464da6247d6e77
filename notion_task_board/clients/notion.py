"""HTTP-клиент для Notion API."""
from __future__ import annotations

from typing import Dict, List, Optional

import requests

from notion_task_board import __version__
from notion_task_board.config import NotionCredentials


class NotionAPIError(RuntimeError):
    """Ошибка Notion API."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404 or self.code == "object_not_found"


class NotionClient:
    """Минимальный клиент Notion API: запрос базы, чтение, создание и изменение страниц."""

    def __init__(self, config: NotionCredentials, session: Optional[requests.Session] = None) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {self._config.token}",
                "Notion-Version": self._config.notion_version,
                "User-Agent": f"notion-task-board/{__version__}",
                "Accept": "application/json",
            }
        )

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    def _request(self, method: str, endpoint: str, **kwargs) -> Dict:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self._session.request(method, url, timeout=self._config.timeout, **kwargs)
        except requests.Timeout as exc:
            raise NotionAPIError(
                f"Таймаут {self._config.timeout}s при запросе {method} {url}"
            ) from exc
        except requests.RequestException as exc:
            raise NotionAPIError(f"Сетевая ошибка при запросе {method} {url}: {exc}") from exc

        if response.status_code >= 400:
            code = None
            try:
                error_body = response.json()
            except ValueError:
                error_body = None
            if isinstance(error_body, dict):
                code = error_body.get("code")
            raise NotionAPIError(
                f"Ошибка Notion {response.status_code} при запросе {method} {url}: {response.text}",
                status_code=response.status_code,
                code=code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise NotionAPIError(f"Некорректный JSON в ответе {method} {url}") from exc
        if not isinstance(payload, dict):
            raise NotionAPIError(f"Неожиданный ответ {method} {url}: ожидался объект")
        return payload

    def query_database(self, database_id: str, sorts: Optional[List[Dict]] = None) -> List[Dict]:
        """Возвращает первую страницу результатов запроса к базе."""
        body: Dict[str, object] = {}
        if sorts:
            body["sorts"] = sorts
        payload = self._request("POST", f"/databases/{database_id}/query", json=body)
        results = payload.get("results")
        if not isinstance(results, list):
            raise NotionAPIError(f"В ответе запроса к базе {database_id} нет списка results")
        return results

    def retrieve_database(self, database_id: str) -> Dict:
        return self._request("GET", f"/databases/{database_id}")

    def retrieve_page(self, page_id: str) -> Dict:
        return self._request("GET", f"/pages/{page_id}")

    def create_page(self, database_id: str, properties: Dict) -> Dict:
        payload = {
            "parent": {"database_id": database_id},
            "properties": properties,
        }
        return self._request("POST", "/pages", json=payload)

    def update_page(self, page_id: str, properties: Dict) -> Dict:
        return self._request("PATCH", f"/pages/{page_id}", json={"properties": properties})

    def get_me(self) -> Dict:
        """Пользователь-бот, от имени которого работает токен. Годится для проверки авторизации."""
        return self._request("GET", "/users/me")


__all__ = ["NotionClient", "NotionAPIError"]
