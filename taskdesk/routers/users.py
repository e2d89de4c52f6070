from fastapi import APIRouter, Depends

from taskdesk.auth import get_current_actor
from taskdesk.models.users import (
    Actor,
    DeleteUserResponse,
    MemberWithTaskCounts,
    ProvisionUserRequest,
    User,
)
from taskdesk.services import users as users_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/provision", status_code=201)
def provision_user(request: ProvisionUserRequest) -> User:
    return users_service.provision_user(request)


@router.get("")
def list_members(actor: Actor = Depends(get_current_actor)) -> list[MemberWithTaskCounts]:
    return users_service.list_members(actor)


@router.get("/{user_id}")
def get_user(user_id: str, actor: Actor = Depends(get_current_actor)) -> User:
    return users_service.get_user(actor, user_id)


@router.delete("/{user_id}")
def delete_user(user_id: str, actor: Actor = Depends(get_current_actor)) -> DeleteUserResponse:
    user = users_service.delete_user(actor, user_id)
    return DeleteUserResponse(message="User deleted successfully", user=user)
