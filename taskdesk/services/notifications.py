"""Outbound notifications.

``dispatch`` hands delivery to a background pool and returns at once. A failed
delivery is logged and dropped; it never reaches the request that caused it.
"""

import html
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from loguru import logger

from taskdesk.config import get_settings
from taskdesk.http_client import WEBHOOK_TIMEOUT, get_session
from taskdesk.models.tasks import Task
from taskdesk.models.users import User

TASK_ASSIGNED_SUBJECT = "New Task Just Landed On Your Desk!"

_executor: ThreadPoolExecutor | None = None


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=get_settings().notification_workers,
            thread_name_prefix="taskdesk-notify",
        )
    return _executor


def _send_smtp(recipient: str, subject: str, text: str, html_body: str) -> None:
    settings = get_settings()
    mime = MIMEMultipart("alternative")
    mime["From"] = settings.mail_from or settings.smtp_username
    mime["To"] = recipient
    mime["Subject"] = subject
    mime.attach(MIMEText(text, "plain"))
    mime.attach(MIMEText(html_body, "html"))
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
        smtp.starttls()
        if settings.smtp_username:
            smtp.login(settings.smtp_username, settings.smtp_password)
        smtp.send_message(mime)


def _send_webhook(recipient: str, subject: str, text: str, html_body: str) -> None:
    settings = get_settings()
    if not settings.webhook_url:
        raise RuntimeError("Webhook notifier selected but TASKDESK_WEBHOOK_URL is not set.")
    resp = get_session().post(
        settings.webhook_url,
        json={"to": recipient, "subject": subject, "text": text, "html": html_body},
        timeout=WEBHOOK_TIMEOUT,
    )
    resp.raise_for_status()


def send_notification(recipient: str, subject: str, text: str, html_body: str) -> None:
    """Deliver one message synchronously through the configured backend. Raises on failure."""
    backend = get_settings().notifier
    if backend == "smtp":
        _send_smtp(recipient, subject, text, html_body)
    elif backend == "webhook":
        _send_webhook(recipient, subject, text, html_body)
    elif backend == "log":
        logger.info("notification to={} subject={!r}", recipient, subject)
    else:
        raise ValueError(f"Unknown notifier backend: {backend}")


def _deliver(recipient: str, subject: str, text: str, html_body: str) -> bool:
    try:
        send_notification(recipient, subject, text, html_body)
        return True
    except Exception as e:
        logger.warning("notification to {} failed: {}: {}", recipient, type(e).__name__, e)
        return False


def dispatch(recipient: str, subject: str, text: str, html_body: str) -> Future:
    """Queue a message for background delivery. The future resolves to True on success."""
    return _get_executor().submit(_deliver, recipient, subject, text, html_body)


def compose_task_assigned(user: User, task: Task) -> tuple[str, str, str]:
    """Return (subject, text, html) for a task-assignment notice."""
    due = task.due_date.strftime("%Y-%m-%d") if task.due_date else "N/A"
    dashboard_url = get_settings().dashboard_url
    text = (
        f"Hey {user.name},\n\n"
        "You've just been assigned a new task!\n\n"
        f"Task: {task.title}\n"
        f"Due Date: {due}\n"
        f"Priority: {task.priority}\n\n"
        f"Head over to your dashboard to check out the details: {dashboard_url}\n"
    )
    html_body = (
        f"<p>Hi <b>{html.escape(user.name)}</b>,</p>"
        "<p>You've just been assigned a new task!</p>"
        "<ul>"
        f"<li><b>Task:</b> {html.escape(task.title)}</li>"
        f"<li><b>Due Date:</b> {due}</li>"
        f"<li><b>Priority:</b> {task.priority}</li>"
        "</ul>"
        f'<p><a href="{html.escape(dashboard_url)}">Go to Dashboard</a></p>'
    )
    return TASK_ASSIGNED_SUBJECT, text, html_body


def notify_task_assigned(user: User, task: Task) -> Future:
    subject, text, html_body = compose_task_assigned(user, task)
    return dispatch(user.email, subject, text, html_body)
