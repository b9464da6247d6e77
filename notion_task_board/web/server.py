"""
REST API доски задач.

Тонкая обёртка над ``TaskSyncService``: разбирает тело запроса, вызывает
сервис и переводит ошибки приложения в HTTP-статусы.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from notion_task_board import __version__
from notion_task_board.clients import NotionAPIError
from notion_task_board.errors import (
    NotFoundError,
    SchemaMismatchError,
    TaskBoardError,
    UpstreamError,
    ValidationError,
)
from notion_task_board.models import TaskUpdate
from notion_task_board.services import TaskSyncService

LOGGER = logging.getLogger(__name__)


class TaskCreateRequest(BaseModel):
    """Тело запроса на создание задачи."""
    title: Optional[str] = None
    status: Optional[str] = None


class TaskUpdateRequest(BaseModel):
    """Тело запроса на изменение задачи."""
    title: Optional[str] = None
    status: Optional[str] = None


def get_service(request: Request) -> TaskSyncService:
    return request.app.state.task_service


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(service: TaskSyncService, cors_origins: Sequence[str] = ("*",)) -> FastAPI:
    """Собирает приложение FastAPI вокруг готового сервиса."""
    app = FastAPI(title="Notion Task Board API", version=__version__)
    app.state.task_service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(UpstreamError)
    async def _upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    @app.exception_handler(SchemaMismatchError)
    async def _schema_error(request: Request, exc: SchemaMismatchError) -> JSONResponse:
        LOGGER.error("Схема базы Notion не совпадает: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Notion database schema mismatch")

    @app.exception_handler(TaskBoardError)
    async def _app_error(request: Request, exc: TaskBoardError) -> JSONResponse:
        LOGGER.error("Ошибка приложения: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(RequestValidationError)
    async def _bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object with string fields")

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return _error(exc.status_code, "Not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Необработанная ошибка при %s %s", request.method, request.url.path)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/debug/notion-auth")
    def notion_auth(service: TaskSyncService = Depends(get_service)) -> JSONResponse:
        """Проверка токена Notion запросом /users/me."""
        try:
            user = service.check_auth()
        except UpstreamError as exc:
            body: Dict[str, Any] = {"success": False, "error": str(exc)}
            cause = exc.__cause__
            if isinstance(cause, NotionAPIError) and cause.status_code == 401:
                body["hint"] = "Token is invalid. Use the Internal Integration Secret of the Notion integration"
            return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=body)
        return JSONResponse(content={"success": True, "message": "Notion authentication successful", "user": user})

    @app.get("/api/tasks")
    def list_tasks(service: TaskSyncService = Depends(get_service)):
        return [task.to_dict() for task in service.list_tasks()]

    @app.get("/api/tasks/{task_id}")
    def get_task(task_id: str, service: TaskSyncService = Depends(get_service)):
        return service.get_task(task_id).to_dict()

    @app.post("/api/tasks", status_code=status.HTTP_201_CREATED)
    def create_task(payload: TaskCreateRequest, service: TaskSyncService = Depends(get_service)):
        return service.create_task(payload.title, payload.status).to_dict()

    @app.patch("/api/tasks/{task_id}")
    def update_task(task_id: str, payload: TaskUpdateRequest, service: TaskSyncService = Depends(get_service)):
        update = TaskUpdate(title=payload.title, status=payload.status)
        return service.update_task(task_id, update).to_dict()

    return app


__all__ = ["create_app", "get_service"]
