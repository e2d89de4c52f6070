"""Authorization checks.

Roles are a flat enum and admins pass every check. Nothing here is cached;
callers re-run the checks on every request.
"""

import re

from taskdesk.config import Settings, get_settings
from taskdesk.exceptions import ForbiddenError, InvalidInputError
from taskdesk.models.tasks import Task, TaskFilter
from taskdesk.models.users import Actor, Role

ORGANIZATION_CODE_PATTERN = re.compile(r"^[0-9]{14}$")


def is_assignee(actor: Actor, task: Task) -> bool:
    return actor.id in task.assigned_to


def can_access_task(actor: Actor, task: Task) -> bool:
    """Read, field update, status update and checklist update share this rule."""
    return actor.is_admin or is_assignee(actor, task)


def require_task_access(actor: Actor, task: Task) -> None:
    if not can_access_task(actor, task):
        raise ForbiddenError("Access denied")


def require_admin(actor: Actor, action: str = "perform this action") -> None:
    if not actor.is_admin:
        raise ForbiddenError(f"Access denied, only admins can {action}")


def task_scope(actor: Actor, status: str | None = None) -> TaskFilter:
    """Tasks an actor may list: everything for admins, their assignments otherwise."""
    return TaskFilter(status=status, assigned_to=None if actor.is_admin else actor.id)


def validate_organization_code(code: str, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    if not code:
        raise InvalidInputError("Organization code is required.")
    if not ORGANIZATION_CODE_PATTERN.match(code):
        raise InvalidInputError("Organization code must be exactly 14 digits.")
    if code != settings.organization_code:
        raise InvalidInputError("Invalid organization code.")


def role_for_invite(admin_invite_token: str | None, settings: Settings | None = None) -> Role:
    settings = settings or get_settings()
    if admin_invite_token and settings.admin_invite_token and admin_invite_token == settings.admin_invite_token:
        return "admin"
    return "member"
