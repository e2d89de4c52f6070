"""JSON-file persistence for users and tasks.

Each store keeps one JSON object keyed by record id. Writes go through a
temporary file and an atomic rename while holding a ``filelock`` lock that
sits next to the data file, so several worker processes can share one data
directory.
"""

import contextlib
import json
from collections import Counter
from pathlib import Path

from filelock import FileLock, Timeout

from taskdesk.config import get_settings
from taskdesk.exceptions import ConflictError
from taskdesk.models.tasks import Task, TaskFilter
from taskdesk.models.users import Role, User
from taskdesk.util import utc_now


@contextlib.contextmanager
def file_lock(lock_path: Path, timeout: float):
    """Hold the file lock at ``lock_path``. A lock still busy after ``timeout`` seconds is a conflict."""
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(lock_path, timeout=timeout)
    try:
        lock.acquire()
    except Timeout:
        raise ConflictError(f"Could not acquire lock '{lock_path.stem}' within {timeout}s. Retry later.") from None
    try:
        yield
    finally:
        lock.release()


def task_lock_path(task_id: str) -> Path:
    return get_settings().data_dir / "locks" / f"task-{task_id}.lock"


def task_lock(task_id: str):
    """Serialize read-modify-write cycles against a single task record."""
    return file_lock(task_lock_path(task_id), get_settings().lock_timeout)


def discard_task_lock(task_id: str) -> None:
    """Remove the lock file of a deleted task. Task ids are never reused."""
    task_lock_path(task_id).unlink(missing_ok=True)


class _JsonStore:
    def __init__(self, path: Path, lock_timeout: float | None = None):
        self.path = path
        self.lock_path = path.with_name(f"{path.stem}.lock")
        self.lock_timeout = get_settings().lock_timeout if lock_timeout is None else lock_timeout

    def _locked(self):
        return file_lock(self.lock_path, self.lock_timeout)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text())

    def _write_all(self, records: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(records, indent=2))
        tmp.replace(self.path)


def _matches(task: Task, task_filter: TaskFilter | None) -> bool:
    if task_filter is None:
        return True
    if task_filter.status is not None and task.status != task_filter.status:
        return False
    if task_filter.assigned_to is not None and task_filter.assigned_to not in task.assigned_to:
        return False
    return True


class TaskStore(_JsonStore):
    """Task records. ``save_task`` is an upsert guarded by the record version."""

    def load_task(self, task_id: str) -> Task | None:
        data = self._read_all().get(task_id)
        return Task.model_validate(data) if data else None

    def save_task(self, task: Task) -> Task:
        with self._locked():
            records = self._read_all()
            current = records.get(task.id)
            stored_version = current["version"] if current else 0
            if stored_version != task.version:
                raise ConflictError(f"Task {task.id} was modified concurrently. Reload and retry.")
            saved = task.model_copy(update={"version": task.version + 1, "updated_at": utc_now()})
            records[task.id] = saved.model_dump(mode="json")
            self._write_all(records)
            return saved

    def delete_task(self, task_id: str) -> bool:
        with self._locked():
            records = self._read_all()
            if records.pop(task_id, None) is None:
                return False
            self._write_all(records)
            return True

    def list_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        tasks = [Task.model_validate(data) for data in self._read_all().values()]
        return [t for t in tasks if _matches(t, task_filter)]

    def count_tasks(self, task_filter: TaskFilter | None = None) -> int:
        return len(self.list_tasks(task_filter))

    def aggregate_tasks_by_field(self, field: str, task_filter: TaskFilter | None = None) -> dict[str, int]:
        """Count tasks grouped by the value of ``field`` (e.g. ``status``)."""
        return dict(Counter(getattr(t, field) for t in self.list_tasks(task_filter)))

    def pull_assignee(self, user_id: str) -> int:
        """Remove ``user_id`` from every task's assignees. Returns tasks touched."""
        with self._locked():
            records = self._read_all()
            touched = 0
            for task_id, data in records.items():
                task = Task.model_validate(data)
                if user_id not in task.assigned_to:
                    continue
                task.assigned_to = [uid for uid in task.assigned_to if uid != user_id]
                task.version += 1
                task.updated_at = utc_now()
                records[task_id] = task.model_dump(mode="json")
                touched += 1
            if touched:
                self._write_all(records)
            return touched


class UserStore(_JsonStore):
    """User records, keyed by user id."""

    def find_user(self, user_id: str) -> User | None:
        data = self._read_all().get(user_id)
        return User.model_validate(data) if data else None

    def find_users(self, user_ids: list[str]) -> list[User]:
        """Return the users that exist, in the order of ``user_ids``."""
        records = self._read_all()
        return [User.model_validate(records[uid]) for uid in user_ids if uid in records]

    def find_user_by_email(self, email: str) -> User | None:
        for data in self._read_all().values():
            if data["email"].lower() == email.lower():
                return User.model_validate(data)
        return None

    def list_users(self, role: Role | None = None) -> list[User]:
        users = [User.model_validate(data) for data in self._read_all().values()]
        if role is not None:
            users = [u for u in users if u.role == role]
        return users

    def save_user(self, user: User) -> User:
        with self._locked():
            records = self._read_all()
            records[user.id] = user.model_dump(mode="json")
            self._write_all(records)
            return user

    def delete_user(self, user_id: str) -> bool:
        with self._locked():
            records = self._read_all()
            if records.pop(user_id, None) is None:
                return False
            self._write_all(records)
            return True


def get_task_store() -> TaskStore:
    return TaskStore(get_settings().tasks_file)


def get_user_store() -> UserStore:
    return UserStore(get_settings().users_file)
