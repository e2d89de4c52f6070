from datetime import datetime

from pydantic import BaseModel

from taskdesk.models.tasks import Priority, TaskStatus


class DashboardStatistics(BaseModel):
    total_tasks: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0


class DashboardCharts(BaseModel):
    task_distribution: dict[str, int]  # Pending, InProgress, Completed, All
    task_priority_levels: dict[str, int]  # Low, Medium, High


class RecentTask(BaseModel):
    id: str
    title: str
    status: TaskStatus
    priority: Priority
    due_date: datetime | None = None
    created_at: datetime


class DashboardResponse(BaseModel):
    statistics: DashboardStatistics
    charts: DashboardCharts
    recent_tasks: list[RecentTask]
