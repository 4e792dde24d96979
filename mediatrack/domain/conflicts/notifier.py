"""Conflict notifier - Recipients, unsubscribe link and email delivery for one task"""

import logging
from typing import Awaitable, Callable, Optional
from urllib.parse import quote

from ...config import FRONTEND_URL, PUBLIC_API_URL
from ...email_service import send_reservation_conflict_email
from ...models import Task
from ...shared.exceptions import NotificationError
from .tokens import UnsubscribeTokenCodec

logger = logging.getLogger(__name__)


def resolve_recipients(task: Task, debug_override_email: Optional[str] = None) -> list[str]:
    """Assigned photographer plus whoever scheduled the shoot, deduplicated"""
    if debug_override_email:
        # Admin debug override redirects every notification to the admin address
        return [debug_override_email]

    emails: list[str] = []
    for email in (task.assigned_photographer_email, task.scheduled_by_email):
        email = (email or "").strip()
        if email and email.lower() not in (e.lower() for e in emails):
            emails.append(email)
    return emails


class ConflictNotifier:
    """Builds and sends the reservation conflict email for a task"""

    def __init__(
        self,
        token_codec: Optional[UnsubscribeTokenCodec] = None,
        send_func: Callable[..., Awaitable[dict]] = send_reservation_conflict_email,
    ):
        self.token_codec = token_codec or UnsubscribeTokenCodec()
        self.send_func = send_func

    def unsubscribe_url(self, task_id: str) -> Optional[str]:
        token = self.token_codec.issue(task_id)
        if not token:
            return None
        return f"{PUBLIC_API_URL}/conflicts/unsubscribe?token={quote(token)}"

    def task_link(self, task: Task) -> str:
        return f"{FRONTEND_URL}/dashboard/tasks/{task.public_id or task.id}"

    async def notify(self, task: Task, recipients: list[str]) -> None:
        """Send the alert; raises NotificationError so the caller keeps the old fingerprint"""
        try:
            await self.send_func(
                to=recipients,
                property_name=task.property_name or "",
                update_type=task.update_type or "",
                scheduled_start=task.scheduled_start,
                scheduled_end=task.scheduled_end,
                task_link=self.task_link(task),
                unsubscribe_url=self.unsubscribe_url(task.id),
            )
        except Exception as e:
            raise NotificationError(f"Conflict email for task {task.id} failed: {e}") from e
