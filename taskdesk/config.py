from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 9000
    log_level: str = "INFO"
    data_dir: Path = Path("data")
    organization_code: str = ""
    admin_invite_token: str = ""
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    notifier: str = "log"  # "log", "smtp" or "webhook"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    mail_from: str = ""
    webhook_url: str = ""
    dashboard_url: str = "http://localhost:5173/user/dashboard"
    recent_tasks_limit: int = 10
    notification_workers: int = 4
    lock_timeout: float = 10  # seconds to wait for a record lock before answering 409

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "TASKDESK_"}

    @property
    def tasks_file(self) -> Path:
        return self.data_dir / "tasks.json"

    @property
    def users_file(self) -> Path:
        return self.data_dir / "users.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
