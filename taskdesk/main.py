import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from taskdesk.config import get_settings
from taskdesk.exceptions import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from taskdesk.logging_setup import setup_logging
from taskdesk.models.common import ErrorResponse, StatusResponse
from taskdesk.routers.tasks import router as tasks_router
from taskdesk.routers.users import router as users_router
from taskdesk.storage import get_task_store, get_user_store

setup_logging(get_settings().log_level)


# --- FastAPI app ---

api = FastAPI(title="Taskdesk", version="0.1.0")
api.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-User-Id"],
    allow_credentials=True,
)
api.include_router(tasks_router)
api.include_router(users_router)


@api.get("/api/status")
def api_status() -> StatusResponse:
    return StatusResponse(
        service="taskdesk",
        users=len(get_user_store().list_users()),
        tasks=get_task_store().count_tasks(),
        notifier=get_settings().notifier,
    )


@api.get("/api/org-code")
def org_code() -> dict:
    return {"org_code": get_settings().organization_code or None}


# --- Exception handlers ---

def _error(status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error_code=error_code, message=message).model_dump(),
    )


@api.exception_handler(AuthenticationError)
async def auth_error_handler(request: Request, exc: AuthenticationError):
    return _error(401, "auth_error", str(exc))


@api.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, "not_found", str(exc))


@api.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError):
    return _error(403, "forbidden", str(exc))


@api.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return _error(400, "invalid_input", str(exc))


@api.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return _error(400, "invalid_input", details)


@api.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return _error(409, "conflict", str(exc))


@api.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on {} {}", request.method, request.url.path)
    return _error(500, "internal_error", "Internal server error")


def run():
    settings = get_settings()
    uvicorn.run(
        "taskdesk.main:api",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
