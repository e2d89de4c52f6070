import pytest

from fastapi.testclient import TestClient

from taskdesk.config import get_settings
from taskdesk.models.tasks import ChecklistItemInput, CreateTaskRequest
from taskdesk.models.users import Actor, User
from taskdesk.services import tasks as tasks_service
from taskdesk.storage import get_user_store

ORG_CODE = "12345678901234"
INVITE_TOKEN = "invite-secret"

ADMIN = User(id="admin1", name="Ada Admin", email="ada@example.com", role="admin", organization_code=ORG_CODE)
ALICE = User(id="alice", name="Alice", email="alice@example.com", organization_code=ORG_CODE)
BOB = User(id="bob", name="Bob", email="bob@example.com", organization_code=ORG_CODE)
CAROL = User(id="carol", name="Carol", email="carol@example.com", organization_code=ORG_CODE)


def actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=user.role)


@pytest.fixture(autouse=True)
def settings(tmp_path, monkeypatch):
    """Point both stores at a fresh directory and use the logging notifier."""
    monkeypatch.setenv("TASKDESK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKDESK_ORGANIZATION_CODE", ORG_CODE)
    monkeypatch.setenv("TASKDESK_ADMIN_INVITE_TOKEN", INVITE_TOKEN)
    monkeypatch.setenv("TASKDESK_NOTIFIER", "log")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def users():
    store = get_user_store()
    for user in (ADMIN, ALICE, BOB, CAROL):
        store.save_user(user)
    return {"admin": ADMIN, "alice": ALICE, "bob": BOB, "carol": CAROL}


@pytest.fixture
def admin(users):
    return actor_for(ADMIN)


@pytest.fixture
def alice(users):
    return actor_for(ALICE)


@pytest.fixture
def bob(users):
    return actor_for(BOB)


@pytest.fixture
def carol(users):
    return actor_for(CAROL)


@pytest.fixture
def mock_notify(mocker):
    """Capture assignment notices instead of queueing them."""
    return mocker.patch("taskdesk.services.notifications.notify_task_assigned")


@pytest.fixture
def make_task(admin, mock_notify):
    """Create a task as the admin, assigned to alice and bob by default."""

    def _make(items=("Draft", "Review", "Ship", "Announce"), assigned_to=("alice", "bob"), **fields):
        request = CreateTaskRequest(
            title=fields.pop("title", "Launch"),
            assigned_to=list(assigned_to),
            todo_checklist=[ChecklistItemInput(text=text) for text in items],
            **fields,
        )
        task = tasks_service.create_task(admin, request)
        mock_notify.reset_mock()
        return task

    return _make


@pytest.fixture
def api_client(users):
    """FastAPI TestClient for router tests."""
    from taskdesk.main import api
    return TestClient(api)
