from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from taskdesk.models.users import UserSummary
from taskdesk.util import utc_now

TaskStatus = Literal["Pending", "In-Progress", "Completed"]
Priority = Literal["Low", "Medium", "High"]

TASK_STATUSES: tuple[str, ...] = ("Pending", "In-Progress", "Completed")
TASK_PRIORITIES: tuple[str, ...] = ("Low", "Medium", "High")


class ChecklistItem(BaseModel):
    text: str
    completed: bool = False
    completed_by: str | None = None  # user id

    @model_validator(mode="after")
    def _incomplete_has_no_completer(self) -> "ChecklistItem":
        if not self.completed and self.completed_by is not None:
            raise ValueError("an incomplete checklist item cannot have a completer")
        return self


class Task(BaseModel):
    id: str
    title: str
    description: str = ""
    priority: Priority = "Medium"
    due_date: datetime | None = None
    status: TaskStatus = "Pending"
    progress: int = Field(default=0, ge=0, le=100)
    assigned_to: list[str] = []
    created_by: list[str] = []
    todo_checklist: list[ChecklistItem] = []
    attachments: list[str] = []
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    version: int = 0


class TaskFilter(BaseModel):
    status: TaskStatus | None = None
    assigned_to: str | None = None  # user id


class ChecklistItemInput(BaseModel):
    """A checklist line supplied when a task's checklist is replaced wholesale."""

    text: str
    completed: bool = False


class ChecklistItemUpdate(BaseModel):
    """Requested completion state for the checklist item at the same index."""

    text: str | None = None
    completed: bool = False


class CreateTaskRequest(BaseModel):
    title: str
    description: str = ""
    priority: Priority = "Medium"
    due_date: datetime | None = None
    assigned_to: list[str]
    todo_checklist: list[ChecklistItemInput] = []
    attachments: list[str] = []


class UpdateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    priority: Priority | None = None
    due_date: datetime | None = None
    assigned_to: list[str] | None = None
    todo_checklist: list[ChecklistItemInput] | None = None
    attachments: list[str] | None = None


class UpdateStatusRequest(BaseModel):
    status: TaskStatus


class UpdateChecklistRequest(BaseModel):
    todo_checklist: list[ChecklistItemUpdate]


class TaskWithCounts(Task):
    completed_todo_count: int = 0


class StatusSummary(BaseModel):
    all: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    completed_tasks: int = 0


class TaskListResponse(BaseModel):
    tasks: list[TaskWithCounts]
    status_summary: StatusSummary


class TaskResponse(BaseModel):
    message: str
    task: Task


class CheckpointRef(BaseModel):
    text: str


class CheckpointStat(BaseModel):
    user_id: str
    user: UserSummary | None = None  # None when the completer was deleted
    count: int
    checkpoints: list[CheckpointRef]


class CheckpointStatsResponse(BaseModel):
    stats: list[CheckpointStat]
