"""Task operations.

Every operation takes the authenticated actor, checks the policy, and only
then loads, mutates and saves the single task record it targets. Validation
and authorization failures are raised before anything is written.
"""

import contextlib

from loguru import logger

from taskdesk.exceptions import NotFoundError
from taskdesk.models.tasks import (
    ChecklistItemUpdate,
    CheckpointRef,
    CheckpointStat,
    CreateTaskRequest,
    StatusSummary,
    Task,
    TaskFilter,
    TaskListResponse,
    TaskStatus,
    TaskWithCounts,
    UpdateTaskRequest,
)
from taskdesk.models.users import Actor, UserSummary
from taskdesk.services import assignment
from taskdesk.services.checklist import (
    apply_checklist_update,
    completed_count,
    force_status,
    recompute_progress,
    replace_checklist,
)
from taskdesk.services.policy import require_admin, require_task_access, task_scope
from taskdesk.storage import discard_task_lock, get_task_store, get_user_store, task_lock
from taskdesk.util import generate_id


def _load(task_id: str) -> Task:
    task = get_task_store().load_task(task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


@contextlib.contextmanager
def _locked_task(task_id: str):
    """Load a task under its record lock.

    Unknown ids are rejected before a lock file is created for them.
    """
    _load(task_id)
    with task_lock(task_id):
        yield _load(task_id)


def _status_summary(actor: Actor) -> StatusSummary:
    store = get_task_store()
    scope = task_scope(actor)
    counts = store.aggregate_tasks_by_field("status", scope)
    return StatusSummary(
        all=store.count_tasks(scope),
        pending_tasks=counts.get("Pending", 0),
        in_progress_tasks=counts.get("In-Progress", 0),
        completed_tasks=counts.get("Completed", 0),
    )


def list_tasks(actor: Actor, status: TaskStatus | None = None) -> TaskListResponse:
    """Tasks visible to the actor, each with its completed checklist count.

    The status summary always covers the actor's whole scope, whatever the
    status filter.
    """
    tasks = get_task_store().list_tasks(task_scope(actor, status))
    return TaskListResponse(
        tasks=[
            TaskWithCounts(**t.model_dump(), completed_todo_count=completed_count(t))
            for t in tasks
        ],
        status_summary=_status_summary(actor),
    )


def get_task(actor: Actor, task_id: str) -> Task:
    task = _load(task_id)
    require_task_access(actor, task)
    return task


def create_task(actor: Actor, request: CreateTaskRequest) -> Task:
    require_admin(actor, "create tasks")
    assignees = assignment.normalize_assignees(request.assigned_to)
    assignment.require_users_exist(assignees)
    task = Task(
        id=generate_id(),
        title=request.title,
        description=request.description,
        priority=request.priority,
        due_date=request.due_date,
        assigned_to=assignees,
        created_by=[actor.id],
        todo_checklist=replace_checklist([], request.todo_checklist, actor),
        attachments=list(request.attachments),
    )
    recompute_progress(task)
    saved = get_task_store().save_task(task)
    logger.info("task {} created by {} for {} assignees", saved.id, actor.id, len(assignees))
    assignment.notify_assignees(assignees, saved)
    return saved


def update_task(actor: Actor, task_id: str, request: UpdateTaskRequest) -> Task:
    """Update the supplied fields. Only provided fields are changed."""
    with _locked_task(task_id) as task:
        require_task_access(actor, task)
        new_assignees = None
        if request.assigned_to is not None:
            new_assignees = assignment.normalize_assignees(request.assigned_to)
            assignment.require_users_exist(new_assignees)

        if request.title is not None:
            task.title = request.title
        if request.description is not None:
            task.description = request.description
        if request.priority is not None:
            task.priority = request.priority
        if request.due_date is not None:
            task.due_date = request.due_date
        if request.attachments is not None:
            task.attachments = list(request.attachments)
        if request.todo_checklist is not None:
            task.todo_checklist = replace_checklist(task.todo_checklist, request.todo_checklist, actor)
            recompute_progress(task)

        added = []
        if new_assignees is not None:
            added = assignment.apply_assignment(task, new_assignees)

        saved = get_task_store().save_task(task)

    logger.info("task {} updated by {}", saved.id, actor.id)
    assignment.notify_assignees(added, saved)
    return saved


def delete_task(actor: Actor, task_id: str) -> None:
    require_admin(actor, "delete tasks")
    with _locked_task(task_id):
        get_task_store().delete_task(task_id)
    discard_task_lock(task_id)
    logger.info("task {} deleted by {}", task_id, actor.id)


def update_task_status(actor: Actor, task_id: str, status: TaskStatus) -> Task:
    """Set the status directly; see ``checklist.force_status`` for the side effects."""
    with _locked_task(task_id) as task:
        require_task_access(actor, task)
        force_status(task, status)
        saved = get_task_store().save_task(task)
    logger.info("task {} status set to {} by {}", saved.id, status, actor.id)
    return saved


def update_task_checklist(actor: Actor, task_id: str, todo_checklist: list[ChecklistItemUpdate]) -> Task:
    """Apply per-item completion changes, then roll progress and status up."""
    with _locked_task(task_id) as task:
        require_task_access(actor, task)
        task.todo_checklist = apply_checklist_update(task.todo_checklist, todo_checklist, actor)
        recompute_progress(task)
        saved = get_task_store().save_task(task)
    logger.info("task {} checklist updated by {}, progress {}", saved.id, actor.id, saved.progress)
    return saved


def get_checkpoint_stats(actor: Actor, task_id: str) -> list[CheckpointStat]:
    """Completed checklist items grouped by the user who completed them."""
    require_admin(actor, "view checkpoint statistics")
    task = _load(task_id)
    grouped: dict[str, list[CheckpointRef]] = {}
    for item in task.todo_checklist:
        if item.completed and item.completed_by:
            grouped.setdefault(item.completed_by, []).append(CheckpointRef(text=item.text))

    users = {u.id: u for u in get_user_store().find_users(list(grouped))}
    stats = []
    for user_id, checkpoints in grouped.items():
        user = users.get(user_id)
        stats.append(CheckpointStat(
            user_id=user_id,
            user=UserSummary(id=user.id, name=user.name, email=user.email) if user else None,
            count=len(checkpoints),
            checkpoints=checkpoints,
        ))
    return stats


def count_tasks_for_user(user_id: str, status: TaskStatus) -> int:
    return get_task_store().count_tasks(TaskFilter(assigned_to=user_id, status=status))
