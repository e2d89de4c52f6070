"""Dashboard statistics over a collection of tasks."""

import re
from datetime import datetime
from typing import Literal

from taskdesk.config import get_settings
from taskdesk.models.dashboard import DashboardCharts, DashboardResponse, DashboardStatistics, RecentTask
from taskdesk.models.tasks import TASK_PRIORITIES, TASK_STATUSES, Task, TaskFilter
from taskdesk.models.users import Actor
from taskdesk.services.policy import require_admin
from taskdesk.storage import get_task_store
from taskdesk.util import as_utc, utc_now

Scope = Literal["all", "mine"]


def _distribution_key(status: str) -> str:
    return re.sub(r"[\s-]+", "", status)


def is_overdue(task: Task, now: datetime) -> bool:
    return task.status != "Completed" and task.due_date is not None and as_utc(task.due_date) < as_utc(now)


def compute_dashboard(tasks: list[Task], now: datetime | None = None, limit: int = 10) -> DashboardResponse:
    """Summarize ``tasks`` without touching them. An empty list gives all zeros."""
    now = now or utc_now()
    by_status = {status: 0 for status in TASK_STATUSES}
    by_priority = {priority: 0 for priority in TASK_PRIORITIES}
    overdue = 0
    for task in tasks:
        by_status[task.status] += 1
        by_priority[task.priority] += 1
        if is_overdue(task, now):
            overdue += 1

    distribution = {_distribution_key(status): count for status, count in by_status.items()}
    distribution["All"] = len(tasks)

    recent = sorted(tasks, key=lambda t: as_utc(t.created_at), reverse=True)[:limit]
    return DashboardResponse(
        statistics=DashboardStatistics(
            total_tasks=len(tasks),
            pending_tasks=by_status["Pending"],
            in_progress_tasks=by_status["In-Progress"],
            completed_tasks=by_status["Completed"],
            overdue_tasks=overdue,
        ),
        charts=DashboardCharts(task_distribution=distribution, task_priority_levels=by_priority),
        recent_tasks=[
            RecentTask(
                id=t.id, title=t.title, status=t.status, priority=t.priority,
                due_date=t.due_date, created_at=t.created_at,
            )
            for t in recent
        ],
    )


def get_dashboard(actor: Actor, scope: Scope = "mine", status: str | None = None) -> DashboardResponse:
    """Admin-wide (``all``) or personal (``mine``) dashboard, optionally narrowed by status."""
    if scope == "all":
        require_admin(actor, "view the organization dashboard")
        task_filter = TaskFilter(status=status)
    else:
        task_filter = TaskFilter(status=status, assigned_to=actor.id)
    tasks = get_task_store().list_tasks(task_filter)
    return compute_dashboard(tasks, limit=get_settings().recent_tasks_limit)
