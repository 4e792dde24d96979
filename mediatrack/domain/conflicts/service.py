"""
Reservation Conflict Service
One batch run over all Shooting tasks: fetch each property's calendar, evaluate the
scheduled shoot against it, email new conflicts and record what was notified.

Tasks are evaluated concurrently (bounded); a failure on one task is logged and never
affects the others. Fingerprints are only recorded after a successful send.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from ...config import CONFLICT_MAX_CONCURRENCY, ICAL_FETCH_TIMEOUT
from ...models import Property, Task
from ...shared.exceptions import FeedFetchError, NotificationError, PersistenceConflict
from ..availability.aggregator import resolve_ical_url
from ..availability.feed_client import ICalFeedClient
from .detector import evaluate
from .notifier import ConflictNotifier, resolve_recipients
from .repository import TaskConflictStateRepository, state_from_task

logger = logging.getLogger(__name__)

# Per-task outcomes
NO_CONFLICT = "no_conflict"
ALREADY_NOTIFIED = "already_notified"
NOTIFIED = "notified"
NOTIFIED_NOT_RECORDED = "notified_not_recorded"
SEND_FAILED = "send_failed"
NO_RECIPIENTS = "no_recipients"
FEED_UNAVAILABLE = "feed_unavailable"
SKIPPED_OPTED_OUT = "skipped_opted_out"
SKIPPED_NO_CALENDAR = "skipped_no_calendar"
FAILED = "failed"


@dataclass
class ConflictOutcome:
    task_id: str
    status: str
    fingerprint: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ConflictRunSummary:
    checked: int = 0
    outcomes: list[ConflictOutcome] = field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    def as_dict(self) -> dict:
        counts: dict[str, int] = {}
        for outcome in self.outcomes:
            counts[outcome.status] = counts.get(outcome.status, 0) + 1
        return {"checked": self.checked, **counts}


class ConflictNotificationService:
    """Service layer for the scheduled reservation conflict run"""

    def __init__(
        self,
        db: Session,
        feed_client: Optional[ICalFeedClient] = None,
        notifier: Optional[ConflictNotifier] = None,
        max_concurrency: int = CONFLICT_MAX_CONCURRENCY,
    ):
        self.db = db
        self.repo = TaskConflictStateRepository(db)
        self.feed_client = feed_client
        self.notifier = notifier or ConflictNotifier()
        self.max_concurrency = max_concurrency

    async def evaluate_task(
        self,
        task: Task,
        ical_url: str,
        feed_client: ICalFeedClient,
        now: datetime,
        debug_override_email: Optional[str],
    ) -> ConflictOutcome:
        """fetch → parse → overlap → fingerprint → decision → send, for one task"""
        try:
            busy = await feed_client.fetch_busy(ical_url)
        except FeedFetchError as e:
            logger.warning(f"⚠️ Skipping task {task.id} this run: {e}")
            return ConflictOutcome(task.id, FEED_UNAVAILABLE, error=str(e))

        decision = evaluate(state_from_task(task), busy, now)
        if not decision.has_conflict:
            return ConflictOutcome(task.id, NO_CONFLICT)
        if not decision.should_notify:
            return ConflictOutcome(task.id, ALREADY_NOTIFIED, fingerprint=decision.fingerprint)

        recipients = resolve_recipients(task, debug_override_email)
        if not recipients:
            logger.warning(f"⚠️ Conflict on task {task.id} but no recipients to notify")
            return ConflictOutcome(task.id, NO_RECIPIENTS, fingerprint=decision.fingerprint)

        try:
            await self.notifier.notify(task, recipients)
        except NotificationError as e:
            logger.error(f"❌ {e}")
            return ConflictOutcome(task.id, SEND_FAILED, fingerprint=decision.fingerprint, error=str(e))

        logger.info(
            f"📧 Conflict alert sent for task {task.id} "
            f"({len(decision.overlaps)} overlapping reservations) to {recipients}"
        )
        return ConflictOutcome(task.id, NOTIFIED, fingerprint=decision.fingerprint)

    async def _run_all(self, work: list[tuple[Task, str]], now: datetime, debug_email: Optional[str]) -> list[ConflictOutcome]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _guarded(task: Task, ical_url: str, feed_client: ICalFeedClient) -> ConflictOutcome:
            async with semaphore:
                try:
                    return await self.evaluate_task(task, ical_url, feed_client, now, debug_email)
                except Exception as e:
                    logger.error(f"❌ Conflict check failed for task {task.id}: {e}")
                    return ConflictOutcome(task.id, FAILED, error=str(e))

        if self.feed_client is not None:
            return list(await asyncio.gather(*(_guarded(t, url, self.feed_client) for t, url in work)))

        async with httpx.AsyncClient(follow_redirects=True, timeout=ICAL_FETCH_TIMEOUT) as client:
            feed_client = ICalFeedClient(client=client)
            return list(await asyncio.gather(*(_guarded(t, url, feed_client) for t, url in work)))

    def _record(self, outcome: ConflictOutcome, now: datetime) -> ConflictOutcome:
        try:
            self.repo.set_task_conflict_state(outcome.task_id, outcome.fingerprint, alerted_at=now)
        except PersistenceConflict as e:
            # The next run re-sends rather than silently dropping the alert
            logger.error(f"❌ {e}")
            return ConflictOutcome(
                outcome.task_id, NOTIFIED_NOT_RECORDED, fingerprint=outcome.fingerprint, error=str(e)
            )
        return outcome

    async def process_once(self, now: datetime) -> ConflictRunSummary:
        """Evaluate every candidate task once and return per-task outcomes"""
        summary = ConflictRunSummary()
        tasks = self.repo.get_candidate_tasks()
        properties = self.db.query(Property).all()
        debug_email = self.repo.get_debug_override_email()
        if debug_email:
            logger.info(f"🛠️ Admin debug override active, alerts go to {debug_email}")

        work: list[tuple[Task, str]] = []
        for task in tasks:
            summary.checked += 1
            if task.opted_out_of_conflict_alerts:
                summary.outcomes.append(ConflictOutcome(task.id, SKIPPED_OPTED_OUT))
                continue
            ical_url = resolve_ical_url(task, properties)
            if not ical_url:
                summary.outcomes.append(ConflictOutcome(task.id, SKIPPED_NO_CALENDAR))
                continue
            work.append((task, ical_url))

        logger.info(f"🔎 Reservation conflict run: {len(work)} of {len(tasks)} tasks to evaluate")
        for outcome in await self._run_all(work, now, debug_email):
            if outcome.status == NOTIFIED:
                outcome = self._record(outcome, now)
            summary.outcomes.append(outcome)

        logger.info(f"Reservation conflict run complete: {summary.as_dict()}")
        return summary
