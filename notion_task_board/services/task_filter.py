"""Клиентская фильтрация списка задач."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from dateutil import parser

from notion_task_board.models import Task


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def filter_tasks(
    tasks: Iterable[Task],
    *,
    status: Optional[str] = None,
    search: Optional[str] = None,
    since: Optional[datetime] = None,
) -> List[Task]:
    """Отбирает задачи по статусу, подстроке заголовка и времени изменения.

    Порядок исходного списка сохраняется. Наивное ``since`` считается UTC;
    задачи без времени изменения при заданном ``since`` отбрасываются.
    """
    needle = search.casefold() if search else None
    since = _as_utc(since) if since else None
    result = []
    for task in tasks:
        if status is not None and task.status != status:
            continue
        if needle and needle not in task.title.casefold():
            continue
        if since is not None:
            if not task.updated_at or _as_utc(parser.isoparse(task.updated_at)) < since:
                continue
        result.append(task)
    return result


__all__ = ["filter_tasks"]
