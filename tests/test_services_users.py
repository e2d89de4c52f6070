import pytest

from conftest import INVITE_TOKEN, ORG_CODE
from taskdesk.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from taskdesk.models.tasks import ChecklistItemUpdate
from taskdesk.models.users import Actor, ProvisionUserRequest
from taskdesk.services import tasks as tasks_service
from taskdesk.services import users as users_service
from taskdesk.storage import get_task_store, get_user_store


class TestProvisionUser:
    def test_member_by_default(self):
        user = users_service.provision_user(
            ProvisionUserRequest(name="Dan", email="dan@example.com", organization_code=ORG_CODE)
        )
        assert user.role == "member"
        assert get_user_store().find_user(user.id).email == "dan@example.com"

    def test_invite_token_grants_admin(self):
        user = users_service.provision_user(ProvisionUserRequest(
            name="Eve", email="eve@example.com", organization_code=ORG_CODE, admin_invite_token=INVITE_TOKEN,
        ))
        assert user.role == "admin"

    def test_wrong_invite_token_gives_member(self):
        user = users_service.provision_user(ProvisionUserRequest(
            name="Eve", email="eve@example.com", organization_code=ORG_CODE, admin_invite_token="guess",
        ))
        assert user.role == "member"

    @pytest.mark.parametrize("code,message", [
        ("", "required"),
        ("1234", "exactly 14 digits"),
        ("abcdefghijklmn", "exactly 14 digits"),
        ("99999999999999", "Invalid organization code"),
    ])
    def test_rejects_bad_organization_code(self, code, message):
        with pytest.raises(InvalidInputError, match=message):
            users_service.provision_user(
                ProvisionUserRequest(name="Dan", email="dan@example.com", organization_code=code)
            )

    def test_duplicate_email(self, users):
        with pytest.raises(InvalidInputError, match="already exists"):
            users_service.provision_user(
                ProvisionUserRequest(name="A", email="alice@example.com", organization_code=ORG_CODE)
            )


class TestResolveActor:
    def test_known_user(self, users):
        assert users_service.resolve_actor("admin1") == Actor(id="admin1", role="admin")

    def test_unknown_or_missing(self, users):
        assert users_service.resolve_actor("ghost") is None
        assert users_service.resolve_actor(None) is None


class TestListMembers:
    def test_counts_per_status(self, make_task, admin, alice):
        task = make_task()
        make_task(assigned_to=["alice"])
        tasks_service.update_task_checklist(alice, task.id, [ChecklistItemUpdate(completed=True)])
        members = {m.id: m for m in users_service.list_members(admin)}
        assert set(members) == {"alice", "bob", "carol"}
        assert (members["alice"].pending_tasks, members["alice"].in_progress_tasks) == (1, 1)
        assert members["bob"].in_progress_tasks == 1
        assert members["carol"].completed_tasks == 0

    def test_admin_only(self, alice):
        with pytest.raises(ForbiddenError):
            users_service.list_members(alice)


class TestDeleteUser:
    def test_pulls_user_from_tasks(self, make_task, admin):
        task = make_task()
        removed = users_service.delete_user(admin, "bob")
        assert removed.id == "bob"
        assert get_user_store().find_user("bob") is None
        assert get_task_store().load_task(task.id).assigned_to == ["alice"]

    def test_cannot_delete_self(self, admin):
        with pytest.raises(InvalidInputError):
            users_service.delete_user(admin, admin.id)

    def test_cannot_delete_other_admin(self, admin):
        get_user_store().save_user(
            get_user_store().find_user("alice").model_copy(update={"id": "admin2", "role": "admin"})
        )
        with pytest.raises(ForbiddenError):
            users_service.delete_user(admin, "admin2")

    def test_missing_user(self, admin):
        with pytest.raises(NotFoundError):
            users_service.delete_user(admin, "ghost")

    def test_members_cannot_delete(self, alice):
        with pytest.raises(ForbiddenError):
            users_service.delete_user(alice, "bob")


class TestGetUser:
    def test_any_actor_can_read(self, alice):
        assert users_service.get_user(alice, "bob").name == "Bob"

    def test_missing(self, alice):
        with pytest.raises(NotFoundError):
            users_service.get_user(alice, "ghost")
