import pytest
from fastapi.testclient import TestClient

from taskdesk.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from taskdesk.models.tasks import Task

SAMPLE_TASK = Task(id="t1", title="Launch", assigned_to=["alice"])
ADMIN_HEADERS = {"X-User-Id": "admin1"}
ALICE_HEADERS = {"X-User-Id": "alice"}
CAROL_HEADERS = {"X-User-Id": "carol"}


@pytest.fixture
def mock_svc(mocker):
    return mocker.patch("taskdesk.routers.tasks.tasks_service")


class TestActorResolution:
    def test_missing_header_returns_401(self, api_client):
        resp = api_client.get("/api/tasks")
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "auth_error"

    def test_unknown_user_returns_401(self, api_client):
        resp = api_client.get("/api/tasks", headers={"X-User-Id": "ghost"})
        assert resp.status_code == 401


class TestForwarding:
    def test_get_task(self, api_client, mock_svc):
        mock_svc.get_task.return_value = SAMPLE_TASK
        resp = api_client.get("/api/tasks/t1", headers=ALICE_HEADERS)
        assert resp.status_code == 200
        assert resp.json()["title"] == "Launch"
        actor, task_id = mock_svc.get_task.call_args.args
        assert (actor.id, actor.role, task_id) == ("alice", "member", "t1")

    def test_update_status(self, api_client, mock_svc):
        mock_svc.update_task_status.return_value = SAMPLE_TASK
        resp = api_client.put("/api/tasks/t1/status", json={"status": "Completed"}, headers=ALICE_HEADERS)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Task status updated successfully"
        assert mock_svc.update_task_status.call_args.args[2] == "Completed"

    def test_update_checklist(self, api_client, mock_svc):
        mock_svc.update_task_checklist.return_value = SAMPLE_TASK
        api_client.put(
            "/api/tasks/t1/todo",
            json={"todo_checklist": [{"text": "a", "completed": True}, {"completed": False}]},
            headers=ALICE_HEADERS,
        )
        items = mock_svc.update_task_checklist.call_args.args[2]
        assert [i.completed for i in items] == [True, False]


class TestExceptionMapping:
    @pytest.mark.parametrize("exc,status,code", [
        (NotFoundError("Task not found"), 404, "not_found"),
        (ForbiddenError("Access denied"), 403, "forbidden"),
        (InvalidInputError("bad"), 400, "invalid_input"),
        (ConflictError("stale"), 409, "conflict"),
    ])
    def test_domain_errors(self, api_client, mock_svc, exc, status, code):
        mock_svc.get_task.side_effect = exc
        resp = api_client.get("/api/tasks/t1", headers=ALICE_HEADERS)
        assert resp.status_code == status
        assert resp.json() == {"error_code": code, "message": str(exc)}

    def test_unexpected_error_returns_500(self, users, mock_svc):
        from taskdesk.main import api
        client = TestClient(api, raise_server_exceptions=False)
        mock_svc.get_task.side_effect = KeyError("boom")
        resp = client.get("/api/tasks/t1", headers=ALICE_HEADERS)
        assert resp.status_code == 500
        assert resp.json()["error_code"] == "internal_error"

    def test_malformed_status_is_invalid_input(self, api_client, mock_svc):
        resp = api_client.put("/api/tasks/t1/status", json={"status": "Done"}, headers=ALICE_HEADERS)
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "invalid_input"
        mock_svc.update_task_status.assert_not_called()

    def test_non_list_assignees_is_invalid_input(self, api_client, mock_svc):
        resp = api_client.post("/api/tasks", json={"title": "x", "assigned_to": "alice"}, headers=ADMIN_HEADERS)
        assert resp.status_code == 400
        mock_svc.create_task.assert_not_called()


class TestEndToEnd:
    def test_create_work_and_report(self, api_client, mock_notify):
        resp = api_client.post(
            "/api/tasks",
            json={
                "title": "Launch",
                "priority": "High",
                "assigned_to": ["alice", "bob"],
                "todo_checklist": [{"text": "a"}, {"text": "b"}],
            },
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 201
        task_id = resp.json()["task"]["id"]
        assert mock_notify.call_count == 2

        resp = api_client.get(f"/api/tasks/{task_id}", headers=CAROL_HEADERS)
        assert resp.status_code == 403

        resp = api_client.put(
            f"/api/tasks/{task_id}/todo",
            json={"todo_checklist": [{"completed": True}, {"completed": False}]},
            headers=ALICE_HEADERS,
        )
        body = resp.json()["task"]
        assert body["progress"] == 50
        assert body["status"] == "In-Progress"

        resp = api_client.put(
            f"/api/tasks/{task_id}/todo",
            json={"todo_checklist": [{"completed": False}, {"completed": False}]},
            headers={"X-User-Id": "bob"},
        )
        assert resp.status_code == 403
        assert resp.json()["message"] == "You cannot uncheck this checkpoint."

        listing = api_client.get("/api/tasks", headers=ALICE_HEADERS).json()
        assert listing["tasks"][0]["completed_todo_count"] == 1
        assert listing["status_summary"]["in_progress_tasks"] == 1

        stats = api_client.get(f"/api/tasks/{task_id}/checkpoint-stats", headers=ADMIN_HEADERS).json()
        assert stats["stats"][0]["user_id"] == "alice"

        dashboard = api_client.get("/api/tasks/dashboard-data", headers=ADMIN_HEADERS).json()
        assert dashboard["charts"]["task_distribution"]["InProgress"] == 1
        assert dashboard["charts"]["task_priority_levels"]["High"] == 1

        mine = api_client.get("/api/tasks/user-dashboard-data", headers=CAROL_HEADERS).json()
        assert mine["statistics"]["total_tasks"] == 0
        assert mine["recent_tasks"] == []

        resp = api_client.delete(f"/api/tasks/{task_id}", headers=ALICE_HEADERS)
        assert resp.status_code == 403
        resp = api_client.delete(f"/api/tasks/{task_id}", headers=ADMIN_HEADERS)
        assert resp.json() == {"message": "Task deleted successfully"}

    def test_member_dashboard_forbidden_for_org_view(self, api_client):
        resp = api_client.get("/api/tasks/dashboard-data", headers=ALICE_HEADERS)
        assert resp.status_code == 403
