"""CLI-интерфейс доски задач."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

import typer
import uvicorn
from dateutil import parser

from notion_task_board.clients import NotionClient
from notion_task_board.config import AppConfig
from notion_task_board.errors import TaskBoardError
from notion_task_board.models import Task, TaskUpdate
from notion_task_board.services import TaskMapper, TaskSyncService, filter_tasks
from notion_task_board.web import create_app

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LOGGER = logging.getLogger(__name__)

app = typer.Typer(help="Доска задач поверх базы Notion")


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_service(config: AppConfig) -> TaskSyncService:
    client = NotionClient(config.notion)
    mapper = TaskMapper(config.schema_options.property_names())
    return TaskSyncService(
        client,
        config.notion.database_id,
        mapper,
        verify_schema_on_first_call=config.schema_options.verify_on_first_call,
    )


def load_config(config_path: Path) -> AppConfig:
    try:
        config = AppConfig.load(config_path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    LOGGER.info("Конфигурация загружена, токен %s, база %s", config.masked_token(), config.notion.database_id)
    return config


def _echo_tasks(tasks: Iterable[Task]) -> None:
    typer.echo(json.dumps([task.to_dict() for task in tasks], indent=2, ensure_ascii=False))


def _run(action):
    try:
        return action()
    except TaskBoardError as exc:
        typer.echo(f"Ошибка: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command("serve")
def serve(
    config_path: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Путь к YAML конфигурации"),
    host: Optional[str] = typer.Option(None, help="Адрес (по умолчанию из конфигурации)"),
    port: Optional[int] = typer.Option(None, help="Порт (по умолчанию из конфигурации)"),
    verbosity: int = typer.Option(0, "--verbose", "-v", count=True, help="Уровень логирования"),
) -> None:
    """Запускает REST API."""
    configure_logging(max(verbosity, 1))
    config = load_config(config_path)
    web_app = create_app(build_service(config), cors_origins=config.server.cors_origins)
    uvicorn.run(web_app, host=host or config.server.host, port=port or config.server.port)


@app.command("verify")
def verify(
    config_path: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Путь к YAML конфигурации"),
    verbosity: int = typer.Option(0, "--verbose", "-v", count=True, help="Уровень логирования"),
) -> None:
    """Проверяет токен Notion и свойства базы."""
    configure_logging(verbosity)
    service = build_service(load_config(config_path))
    user = _run(service.check_auth)
    _run(service.verify_schema)
    typer.echo(f"Соединение успешно, бот: {user.get('name') or user.get('id')}")


@app.command("list")
def list_tasks(
    status: Optional[str] = typer.Option(None, help="Показать только задачи с этим статусом"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Подстрока заголовка"),
    since: Optional[str] = typer.Option(None, help="ISO-время, начиная с которого изменялись задачи"),
    config_path: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Путь к YAML конфигурации"),
    verbosity: int = typer.Option(0, "--verbose", "-v", count=True, help="Уровень логирования"),
) -> None:
    """Выводит задачи, последние изменённые первыми."""
    configure_logging(verbosity)
    try:
        since_dt = parser.isoparse(since) if since else None
    except ValueError as exc:
        raise typer.BadParameter(f"Некорректное ISO-время: {since}", param_hint="--since") from exc
    service = build_service(load_config(config_path))
    tasks = _run(service.list_tasks)
    _echo_tasks(filter_tasks(tasks, status=status, search=search, since=since_dt))


@app.command("add")
def add_task(
    title: str = typer.Argument(..., help="Заголовок задачи"),
    status: Optional[str] = typer.Option(None, help="Начальный статус"),
    config_path: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Путь к YAML конфигурации"),
    verbosity: int = typer.Option(0, "--verbose", "-v", count=True, help="Уровень логирования"),
) -> None:
    """Создаёт задачу."""
    configure_logging(verbosity)
    service = build_service(load_config(config_path))
    _echo_tasks([_run(lambda: service.create_task(title, status))])


@app.command("set-status")
def set_status(
    task_id: str = typer.Argument(..., help="Идентификатор страницы Notion"),
    status: str = typer.Argument(..., help="Новый статус"),
    config_path: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Путь к YAML конфигурации"),
    verbosity: int = typer.Option(0, "--verbose", "-v", count=True, help="Уровень логирования"),
) -> None:
    """Меняет статус задачи."""
    configure_logging(verbosity)
    service = build_service(load_config(config_path))
    _echo_tasks([_run(lambda: service.update_task(task_id, TaskUpdate(status=status)))])


@app.command("rename")
def rename(
    task_id: str = typer.Argument(..., help="Идентификатор страницы Notion"),
    title: str = typer.Argument(..., help="Новый заголовок"),
    config_path: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Путь к YAML конфигурации"),
    verbosity: int = typer.Option(0, "--verbose", "-v", count=True, help="Уровень логирования"),
) -> None:
    """Меняет заголовок задачи."""
    configure_logging(verbosity)
    service = build_service(load_config(config_path))
    _echo_tasks([_run(lambda: service.update_task(task_id, TaskUpdate(title=title)))])


if __name__ == "__main__":
    app()
