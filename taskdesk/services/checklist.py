"""Checklist completion rules and progress roll-up.

Incoming checklist entries are correlated with the stored checklist by
position. Every function here is pure with respect to its inputs: it returns
new items or mutates only the ``Task`` it is handed, never the store.
"""

from taskdesk.exceptions import ForbiddenError
from taskdesk.models.tasks import (
    ChecklistItem,
    ChecklistItemInput,
    ChecklistItemUpdate,
    Task,
    TaskStatus,
)
from taskdesk.models.users import Actor

ALREADY_COMPLETED_MESSAGE = "This checkpoint is already completed by another member."
CANNOT_UNCHECK_MESSAGE = "You cannot uncheck this checkpoint."


def apply_checklist_update(
    existing: list[ChecklistItem],
    incoming: list[ChecklistItemUpdate],
    actor: Actor,
) -> list[ChecklistItem]:
    """Apply requested completion states index by index.

    Returns a new list of the same length as ``existing``; incoming entries
    past its end are ignored. Raises ForbiddenError on the first disallowed
    transition, before anything has been handed back for saving, so a
    rejected batch leaves the stored checklist untouched.
    """
    updated = [item.model_copy() for item in existing]
    for index, (current, requested) in enumerate(zip(existing, incoming)):
        if requested.completed and not current.completed:
            if current.completed_by is None:
                updated[index] = ChecklistItem(text=current.text, completed=True, completed_by=actor.id)
            elif current.completed_by != actor.id and not actor.is_admin:
                raise ForbiddenError(ALREADY_COMPLETED_MESSAGE)
            # otherwise the claimed item stays as it is
        elif not requested.completed and current.completed:
            if current.completed_by == actor.id or actor.is_admin:
                updated[index] = ChecklistItem(text=current.text)
            else:
                raise ForbiddenError(CANNOT_UNCHECK_MESSAGE)
    return updated


def replace_checklist(
    existing: list[ChecklistItem],
    replacement: list[ChecklistItemInput],
    actor: Actor,
) -> list[ChecklistItem]:
    """Build a new checklist from a wholesale replacement.

    A line whose text is unchanged at the same position keeps its stored
    completion state. Any other line marked completed is credited to the actor.
    """
    items = []
    for index, line in enumerate(replacement):
        if index < len(existing) and existing[index].text == line.text:
            items.append(existing[index].model_copy())
        elif line.completed:
            items.append(ChecklistItem(text=line.text, completed=True, completed_by=actor.id))
        else:
            items.append(ChecklistItem(text=line.text))
    return items


def reset_checklist(items: list[ChecklistItem]) -> list[ChecklistItem]:
    return [ChecklistItem(text=item.text) for item in items]


def progress_for(items: list[ChecklistItem]) -> int:
    total = len(items)
    if total == 0:
        return 0
    completed = sum(1 for item in items if item.completed)
    # Round half up: 12.5 -> 13
    return (200 * completed + total) // (2 * total)


def status_for_progress(progress: int) -> TaskStatus:
    if progress == 100:
        return "Completed"
    if progress > 0:
        return "In-Progress"
    return "Pending"


def recompute_progress(task: Task) -> Task:
    task.progress = progress_for(task.todo_checklist)
    task.status = status_for_progress(task.progress)
    return task


def force_status(task: Task, status: TaskStatus) -> Task:
    """Set the status directly.

    ``Completed`` marks every item complete and pins progress at 100; items
    that had no completer keep none. Other statuses leave the checklist and
    progress as they are, so they can disagree until the next checklist update.
    """
    task.status = status
    if status == "Completed":
        task.todo_checklist = [
            ChecklistItem(text=item.text, completed=True, completed_by=item.completed_by)
            for item in task.todo_checklist
        ]
        task.progress = 100
    return task


def completed_count(task: Task) -> int:
    return sum(1 for item in task.todo_checklist if item.completed)
