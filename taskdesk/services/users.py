"""User directory operations."""

from loguru import logger

from taskdesk.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from taskdesk.models.users import Actor, MemberWithTaskCounts, ProvisionUserRequest, User
from taskdesk.services.policy import require_admin, role_for_invite, validate_organization_code
from taskdesk.services.tasks import count_tasks_for_user
from taskdesk.storage import get_task_store, get_user_store
from taskdesk.util import generate_id


def resolve_actor(user_id: str | None) -> Actor | None:
    """Map an upstream-authenticated user id to an actor, or None if unknown."""
    if not user_id:
        return None
    user = get_user_store().find_user(user_id)
    if user is None:
        return None
    return Actor(id=user.id, role=user.role)


def provision_user(request: ProvisionUserRequest) -> User:
    """Add a user to the organization.

    The organization code must match the configured one; a matching admin
    invite token makes the new user an admin.
    """
    validate_organization_code(request.organization_code)
    store = get_user_store()
    if store.find_user_by_email(request.email):
        raise InvalidInputError("User already exists")
    user = User(
        id=generate_id(),
        name=request.name,
        email=request.email,
        role=role_for_invite(request.admin_invite_token),
        organization_code=request.organization_code,
    )
    store.save_user(user)
    logger.info("user {} provisioned as {}", user.id, user.role)
    return user


def list_members(actor: Actor) -> list[MemberWithTaskCounts]:
    require_admin(actor, "list users")
    return [
        MemberWithTaskCounts(
            **user.model_dump(),
            pending_tasks=count_tasks_for_user(user.id, "Pending"),
            in_progress_tasks=count_tasks_for_user(user.id, "In-Progress"),
            completed_tasks=count_tasks_for_user(user.id, "Completed"),
        )
        for user in get_user_store().list_users(role="member")
    ]


def get_user(actor: Actor, user_id: str) -> User:
    user = get_user_store().find_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def delete_user(actor: Actor, user_id: str) -> User:
    """Delete a member and pull them out of every task they were assigned to."""
    require_admin(actor, "delete users")
    if actor.id == user_id:
        raise InvalidInputError("Admins cannot delete themselves")
    store = get_user_store()
    user = store.find_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.role == "admin":
        raise ForbiddenError("Cannot delete another admin")

    touched = get_task_store().pull_assignee(user_id)
    store.delete_user(user_id)
    logger.info("user {} deleted by {}, removed from {} tasks", user_id, actor.id, touched)
    return user
