# tests/conftest.py

from __future__ import annotations

import pytest

from notion_task_board.services import TaskSyncService

from .fakes import FakeNotionClient

DATABASE_ID = "db-1"


@pytest.fixture()
def notion() -> FakeNotionClient:
    return FakeNotionClient()


@pytest.fixture()
def service(notion: FakeNotionClient) -> TaskSyncService:
    """Service wired to the in-memory Notion fake, schema check disabled."""
    return TaskSyncService(notion, DATABASE_ID)
