from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from taskdesk.util import utc_now

Role = Literal["admin", "member"]


class User(BaseModel):
    id: str
    name: str
    email: str
    role: Role = "member"
    organization_code: str = ""
    created_at: datetime = Field(default_factory=utc_now)


class Actor(BaseModel):
    """The authenticated caller, resolved upstream of every operation."""

    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class UserSummary(BaseModel):
    id: str
    name: str
    email: str


class MemberWithTaskCounts(User):
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    completed_tasks: int = 0


class ProvisionUserRequest(BaseModel):
    name: str
    email: str
    organization_code: str
    admin_invite_token: str | None = None


class DeleteUserResponse(BaseModel):
    message: str
    user: User
