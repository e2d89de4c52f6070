from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error_code: str
    message: str


class MessageResponse(BaseModel):
    message: str


class StatusResponse(BaseModel):
    service: str
    users: int
    tasks: int
    notifier: str
