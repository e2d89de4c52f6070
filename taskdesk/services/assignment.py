"""Re-assignment of tasks and the assignment notice fan-out."""

from loguru import logger

from taskdesk.exceptions import InvalidInputError, NotFoundError
from taskdesk.models.tasks import Task
from taskdesk.services import notifications
from taskdesk.services.checklist import recompute_progress, reset_checklist
from taskdesk.storage import get_user_store


def normalize_assignees(value) -> list[str]:
    """Validate an ``assigned_to`` payload and drop duplicate ids, keeping order."""
    if not isinstance(value, list) or not all(isinstance(uid, str) for uid in value):
        raise InvalidInputError("assigned_to must be an array of user ids")
    return list(dict.fromkeys(value))


def require_users_exist(user_ids: list[str]) -> None:
    found = {user.id for user in get_user_store().find_users(user_ids)}
    missing = [uid for uid in user_ids if uid not in found]
    if missing:
        raise NotFoundError(f"Users not found: {', '.join(missing)}")


def assignment_changed(old: list[str], new: list[str]) -> bool:
    return set(old) != set(new)


def newly_assigned(old: list[str], new: list[str]) -> list[str]:
    previous = set(old)
    return [uid for uid in new if uid not in previous]


def apply_assignment(task: Task, new_assignees: list[str]) -> list[str]:
    """Set ``task.assigned_to`` and return the ids that were not assigned before.

    Any membership change resets the whole checklist, including items completed
    by members who stay on the task.
    """
    old = list(task.assigned_to)
    task.assigned_to = new_assignees
    if assignment_changed(old, new_assignees):
        task.todo_checklist = reset_checklist(task.todo_checklist)
        recompute_progress(task)
        logger.info("task {} reassigned, checklist reset", task.id)
    return newly_assigned(old, new_assignees)


def notify_assignees(user_ids: list[str], task: Task) -> None:
    """Queue one assignment notice per user.

    Called after the task is saved, so nothing here may fail the request.
    """
    if not user_ids:
        return
    try:
        for user in get_user_store().find_users(user_ids):
            notifications.notify_task_assigned(user, task)
    except Exception as e:
        logger.warning("assignment notices for task {} not queued: {}: {}", task.id, type(e).__name__, e)
