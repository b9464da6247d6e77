from __future__ import annotations

from datetime import datetime, timezone

from notion_task_board.models import Task
from notion_task_board.services import filter_tasks


def make_tasks():
    return [
        Task(id="1", title="Write Report", status="计划中", updated_at="2024-03-01T00:00:00.000Z"),
        Task(id="2", title="Buy milk", status="待跟进", updated_at="2024-02-01T00:00:00.000Z"),
        Task(id="3", title="report review", status="已解决", updated_at="2024-01-01T00:00:00.000Z"),
    ]


def test_no_filters_keeps_everything_in_order():
    assert [t.id for t in filter_tasks(make_tasks())] == ["1", "2", "3"]


def test_search_is_case_insensitive_substring():
    assert [t.id for t in filter_tasks(make_tasks(), search="REPORT")] == ["1", "3"]


def test_status_is_exact_match():
    assert [t.id for t in filter_tasks(make_tasks(), status="待跟进")] == ["2"]


def test_since_accepts_naive_and_aware_moments():
    aware = datetime(2024, 2, 1, tzinfo=timezone.utc)
    assert [t.id for t in filter_tasks(make_tasks(), since=aware)] == ["1", "2"]
    assert [t.id for t in filter_tasks(make_tasks(), since=datetime(2024, 2, 15))] == ["1"]


def test_filters_combine():
    assert [t.id for t in filter_tasks(make_tasks(), search="report", status="已解决")] == ["3"]
