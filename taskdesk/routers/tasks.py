from fastapi import APIRouter, Depends

from taskdesk.auth import get_current_actor
from taskdesk.models.common import MessageResponse
from taskdesk.models.dashboard import DashboardResponse
from taskdesk.models.tasks import (
    CheckpointStatsResponse,
    CreateTaskRequest,
    Task,
    TaskListResponse,
    TaskResponse,
    TaskStatus,
    UpdateChecklistRequest,
    UpdateStatusRequest,
    UpdateTaskRequest,
)
from taskdesk.models.users import Actor
from taskdesk.services import dashboard as dashboard_service
from taskdesk.services import tasks as tasks_service

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


# --- Dashboards ---


@router.get("/dashboard-data")
def dashboard_data(
    status: TaskStatus | None = None, actor: Actor = Depends(get_current_actor),
) -> DashboardResponse:
    return dashboard_service.get_dashboard(actor, scope="all", status=status)


@router.get("/user-dashboard-data")
def user_dashboard_data(
    status: TaskStatus | None = None, actor: Actor = Depends(get_current_actor),
) -> DashboardResponse:
    return dashboard_service.get_dashboard(actor, scope="mine", status=status)


# --- Tasks ---


@router.get("")
def list_tasks(status: TaskStatus | None = None, actor: Actor = Depends(get_current_actor)) -> TaskListResponse:
    return tasks_service.list_tasks(actor, status)


@router.get("/{task_id}")
def get_task(task_id: str, actor: Actor = Depends(get_current_actor)) -> Task:
    return tasks_service.get_task(actor, task_id)


@router.post("", status_code=201)
def create_task(request: CreateTaskRequest, actor: Actor = Depends(get_current_actor)) -> TaskResponse:
    task = tasks_service.create_task(actor, request)
    return TaskResponse(message="Task created successfully", task=task)


@router.put("/{task_id}")
def update_task(task_id: str, request: UpdateTaskRequest, actor: Actor = Depends(get_current_actor)) -> TaskResponse:
    task = tasks_service.update_task(actor, task_id, request)
    return TaskResponse(message="Task updated successfully", task=task)


@router.delete("/{task_id}")
def delete_task(task_id: str, actor: Actor = Depends(get_current_actor)) -> MessageResponse:
    tasks_service.delete_task(actor, task_id)
    return MessageResponse(message="Task deleted successfully")


@router.put("/{task_id}/status")
def update_task_status(
    task_id: str, request: UpdateStatusRequest, actor: Actor = Depends(get_current_actor),
) -> TaskResponse:
    task = tasks_service.update_task_status(actor, task_id, request.status)
    return TaskResponse(message="Task status updated successfully", task=task)


@router.put("/{task_id}/todo")
def update_task_checklist(
    task_id: str, request: UpdateChecklistRequest, actor: Actor = Depends(get_current_actor),
) -> TaskResponse:
    task = tasks_service.update_task_checklist(actor, task_id, request.todo_checklist)
    return TaskResponse(message="Task checklist updated successfully", task=task)


@router.get("/{task_id}/checkpoint-stats")
def checkpoint_stats(task_id: str, actor: Actor = Depends(get_current_actor)) -> CheckpointStatsResponse:
    return CheckpointStatsResponse(stats=tasks_service.get_checkpoint_stats(actor, task_id))
