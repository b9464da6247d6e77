from __future__ import annotations

import logging

import pytest

from notion_task_board.clients import NotionAPIError
from notion_task_board.errors import NotFoundError, SchemaMismatchError, UpstreamError, ValidationError
from notion_task_board.models import TaskUpdate
from notion_task_board.schema import STATUS_PROPERTY, TITLE_PROPERTY, VALID_STATUS_VALUES
from notion_task_board.services import TaskSyncService
from notion_task_board.services.sync import LAST_EDITED_DESC

from .conftest import DATABASE_ID
from .fakes import FakeNotionClient, make_page


# region list
def test_list_requests_last_edited_descending(service, notion):
    service.list_tasks()
    assert notion.calls == [("query_database", DATABASE_ID, LAST_EDITED_DESC)]


def test_list_keeps_store_order_and_drops_reference_only_results(service, notion):
    notion.pages["old"] = make_page("old", title="Old", edited="2024-01-01T00:00:00.000Z")
    notion.pages["new"] = make_page("new", title="New", edited="2024-03-01T00:00:00.000Z")
    notion.pages["mid"] = make_page("mid", title="Mid", edited="2024-02-01T00:00:00.000Z")
    notion.extra_results.append({"object": "page", "id": "partial"})

    tasks = service.list_tasks()

    assert [task.id for task in tasks] == ["new", "mid", "old"]
    updated = [task.updated_at for task in tasks]
    assert updated == sorted(updated, reverse=True)


def test_list_failure_is_upstream_error(service, notion, caplog):
    notion.fail_with = NotionAPIError("rate limited", status_code=429, code="rate_limited")
    with caplog.at_level(logging.ERROR):
        with pytest.raises(UpstreamError) as exc_info:
            service.list_tasks()
    assert "rate limited" not in str(exc_info.value)
    assert "rate limited" in caplog.text


# endregion

# region get
def test_get_returns_task(service, notion):
    notion.pages["p1"] = make_page("p1", title="Read", status="已解决")
    task = service.get_task("p1")
    assert (task.id, task.title, task.status) == ("p1", "Read", "已解决")


def test_get_unknown_id_is_not_found(service):
    with pytest.raises(NotFoundError) as exc_info:
        service.get_task("missing")
    assert exc_info.value.task_id == "missing"


def test_get_reference_only_response_is_upstream_error(service, notion):
    notion.pages["p1"] = {"object": "page", "id": "p1"}
    with pytest.raises(UpstreamError):
        service.get_task("p1")


def test_get_auth_failure_is_upstream_not_not_found(service, notion):
    notion.fail_with = NotionAPIError("unauthorized", status_code=401, code="unauthorized")
    with pytest.raises(UpstreamError):
        service.get_task("p1")


# endregion

# region create
@pytest.mark.parametrize("title", ["", "   ", None])
def test_create_with_empty_title_never_calls_store(service, notion, title):
    with pytest.raises(ValidationError):
        service.create_task(title)
    assert notion.calls == []


def test_create_with_invalid_status_names_value_and_enumeration(service, notion):
    with pytest.raises(ValidationError) as exc_info:
        service.create_task("Buy milk", "NotAStatus")
    message = str(exc_info.value)
    assert "NotAStatus" in message
    for status in VALID_STATUS_VALUES:
        assert status in message
    assert notion.calls == []


def test_create_defaults_status_and_trims_title(service, notion):
    task = service.create_task("  Write report  ")

    assert task.title == "Write report"
    assert task.status == "待跟进"
    _, database_id, properties = notion.write_calls()[0]
    assert database_id == DATABASE_ID
    assert properties[TITLE_PROPERTY] == {"title": [{"text": {"content": "Write report"}}]}
    assert properties[STATUS_PROPERTY] == {"status": {"name": "待跟进"}}


def test_create_with_explicit_status(service):
    assert service.create_task("Plan", "计划中").status == "计划中"


def test_create_failure_is_upstream_error(service, notion):
    notion.fail_with = NotionAPIError("boom", status_code=500)
    with pytest.raises(UpstreamError, match="Failed to create task in Notion"):
        service.create_task("Plan")


# endregion

# region update
def test_create_then_update_status_keeps_title(service):
    created = service.create_task("Write report")
    assert created.status == "待跟进"

    updated = service.update_task(created.id, TaskUpdate(status="已解决"))

    assert updated.id == created.id
    assert updated.status == "已解决"
    assert updated.title == "Write report"
    assert updated.updated_at > created.updated_at


def test_update_title_sends_only_title(service, notion):
    notion.pages["p1"] = make_page("p1", title="Old", status="搁置")

    task = service.update_task("p1", TaskUpdate(title=" New "))

    _, _, patch = notion.write_calls()[0]
    assert list(patch) == [TITLE_PROPERTY]
    assert (task.title, task.status) == ("New", "搁置")


def test_update_without_fields_is_rejected(service, notion):
    with pytest.raises(ValidationError):
        service.update_task("p1", TaskUpdate())
    assert notion.calls == []


@pytest.mark.parametrize(
    "update",
    [TaskUpdate(title="  "), TaskUpdate(status="done"), TaskUpdate(title="ok", status="待跟进 ")],
)
def test_invalid_update_never_calls_store(service, notion, update):
    with pytest.raises(ValidationError):
        service.update_task("p1", update)
    assert notion.calls == []


def test_update_unknown_id_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.update_task("missing", TaskUpdate(status="丢弃"))


def test_any_status_reachable_from_any_other(service, notion):
    notion.pages["p1"] = make_page("p1", status="已解决")
    for status in reversed(VALID_STATUS_VALUES):
        assert service.update_task("p1", TaskUpdate(status=status)).status == status


# endregion

# region schema
def test_schema_checked_once_before_first_call(notion):
    service = TaskSyncService(notion, DATABASE_ID, verify_schema_on_first_call=True)
    service.list_tasks()
    service.list_tasks()
    assert [call[0] for call in notion.calls] == ["retrieve_database", "query_database", "query_database"]


def test_schema_mismatch_names_missing_property():
    notion = FakeNotionClient(database_properties={"Name": {"type": "title"}, STATUS_PROPERTY: {"type": "select"}})
    service = TaskSyncService(notion, DATABASE_ID, verify_schema_on_first_call=True)

    with pytest.raises(SchemaMismatchError) as exc_info:
        service.list_tasks()

    message = str(exc_info.value)
    assert TITLE_PROPERTY in message
    assert "select" in message
    assert [call[0] for call in notion.calls] == ["retrieve_database"]


def test_validation_precedes_schema_check(notion):
    service = TaskSyncService(notion, DATABASE_ID, verify_schema_on_first_call=True)
    with pytest.raises(ValidationError):
        service.create_task("")
    assert notion.calls == []


def test_missing_database_is_upstream_error(notion):
    notion.fail_with = NotionAPIError("not found", status_code=404, code="object_not_found")
    service = TaskSyncService(notion, DATABASE_ID)
    with pytest.raises(UpstreamError):
        service.verify_schema()


# endregion


# region malformed records
def test_get_with_status_as_plain_string_is_upstream_error(service, notion):
    page = make_page("p1")
    page["properties"][STATUS_PROPERTY]["status"] = "计划中"
    notion.pages["p1"] = page
    with pytest.raises(UpstreamError, match="Failed to fetch task from Notion"):
        service.get_task("p1")


def test_list_with_non_object_title_segment_is_upstream_error(service, notion, caplog):
    page = make_page("p1")
    page["properties"][TITLE_PROPERTY]["title"] = [None]
    notion.pages["p1"] = page
    with caplog.at_level(logging.ERROR):
        with pytest.raises(UpstreamError, match="Failed to fetch tasks from Notion"):
            service.list_tasks()
    assert "Некорректная страница Notion" in caplog.text


def test_page_without_id_is_upstream_error(service, notion):
    page = make_page("p1")
    del page["id"]
    notion.pages["p1"] = page
    with pytest.raises(UpstreamError):
        service.get_task("p1")


def test_create_with_empty_status_is_rejected(service, notion):
    with pytest.raises(ValidationError, match=r"Invalid status value: \."):
        service.create_task("x", "")
    assert notion.calls == []


# endregion


def test_check_auth_returns_bot_user(service):
    assert service.check_auth()["id"] == "bot-1"
