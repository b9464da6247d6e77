"""Загрузка и валидация конфигурации приложения."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from notion_task_board.schema import STATUS_PROPERTY, TITLE_PROPERTY, PropertyNames

ENV_TOKEN = "NOTION_TOKEN"
ENV_DATABASE_ID = "NOTION_DATABASE_ID"
ENV_PORT = "PORT"


class NotionCredentials(BaseModel):
    """Настройки подключения к Notion API."""

    token: str = Field(..., description="Internal Integration Secret интеграции Notion")
    database_id: str = Field(..., description="Идентификатор базы данных с задачами")
    base_url: str = Field("https://api.notion.com/v1", description="Базовый URL Notion API")
    notion_version: str = Field("2022-06-28", description="Значение заголовка Notion-Version")
    timeout: float = Field(30.0, gt=0, description="Таймаут одного запроса к Notion, секунды")

    @field_validator("token", "database_id")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("значение не может быть пустым")
        return value


class SchemaOptions(BaseModel):
    """Имена свойств базы Notion и проверка схемы."""

    title_property: str = Field(TITLE_PROPERTY, description="Свойство-заголовок страницы")
    status_property: str = Field(STATUS_PROPERTY, description="Свойство со статусом задачи")
    verify_on_first_call: bool = Field(
        True, description="Проверять наличие свойств в базе перед первым обращением"
    )

    def property_names(self) -> PropertyNames:
        return PropertyNames(title=self.title_property, status=self.status_property)


class ServerOptions(BaseModel):
    """Параметры HTTP-сервера."""

    host: str = Field("127.0.0.1", description="Адрес для прослушивания")
    port: int = Field(3001, description="Порт HTTP-сервера")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Разрешённые CORS-источники")


class AppConfig(BaseModel):
    """Корневая конфигурация приложения."""

    notion: NotionCredentials
    schema_options: SchemaOptions = Field(default_factory=SchemaOptions, alias="schema")
    server: ServerOptions = Field(default_factory=ServerOptions)

    model_config = {"populate_by_name": True}

    @classmethod
    def load(cls, path: Optional[Path | str] = None, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Загружает конфигурацию из YAML-файла и переменных окружения.

        Переменные окружения имеют приоритет над файлом. Отсутствующий файл
        не ошибка, если токен и база заданы через окружение.
        """
        raw: Dict[str, Any] = {}
        source = "окружения"
        if path is not None and Path(path).exists():
            source = str(path)
            raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        cls._apply_env(raw, os.environ if environ is None else environ)
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise ValueError(f"Конфигурация {source} некорректна: {exc}") from exc

    @staticmethod
    def _apply_env(raw: Dict[str, Any], environ: Mapping[str, str]) -> None:
        notion = raw.setdefault("notion", {})
        if environ.get(ENV_TOKEN):
            notion["token"] = environ[ENV_TOKEN]
        if environ.get(ENV_DATABASE_ID):
            notion["database_id"] = environ[ENV_DATABASE_ID]
        if environ.get(ENV_PORT):
            raw.setdefault("server", {})["port"] = environ[ENV_PORT]

    def masked_token(self) -> str:
        """Описание токена для логов без раскрытия значения."""
        return f"length={len(self.notion.token)}"


__all__ = ["AppConfig", "NotionCredentials", "SchemaOptions", "ServerOptions"]
