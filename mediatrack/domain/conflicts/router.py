"""Conflict router - Unsubscribe link handler and manual conflict run trigger"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.clock import get_now
from .repository import TaskConflictStateRepository
from .schemas import ConflictOutcomeResponse, ConflictRunResponse
from .service import (
    FAILED,
    FEED_UNAVAILABLE,
    NOTIFIED,
    NOTIFIED_NOT_RECORDED,
    SEND_FAILED,
    ConflictNotificationService,
)
from .tokens import REASON_EXPIRED, UnsubscribeTokenCodec

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conflicts", tags=["Reservation Conflicts"])

PAGE_STYLE = (
    "body{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,Helvetica,Arial,sans-serif;"
    "padding:40px;background:#f8fafc;color:#0f172a} .card{max-width:560px;margin:0 auto;"
    "background:#fff;border-radius:12px;box-shadow:0 2px 12px rgba(0,0,0,.08);padding:28px} "
    "h1{font-size:20px;margin:0 0 8px} p{margin:0 0 12px;color:#334155}"
)


def render_page(title: str, heading: str, message: str) -> str:
    return f"""<!doctype html>
<html><head><meta charset="utf-8"><title>{title}</title>
<meta name="viewport" content="width=device-width, initial-scale=1"/>
<style>{PAGE_STYLE}</style>
</head><body><div class="card"><h1>{heading}</h1><p>{message}</p></div></body></html>"""


def get_token_codec() -> UnsubscribeTokenCodec:
    return UnsubscribeTokenCodec()


def get_conflict_service(db: Session = Depends(get_db)) -> ConflictNotificationService:
    """Dependency injection for ConflictNotificationService"""
    return ConflictNotificationService(db)


@router.get("/unsubscribe", response_class=HTMLResponse)
async def unsubscribe_reservation_conflict(
    token: str = Query(""),
    codec: UnsubscribeTokenCodec = Depends(get_token_codec),
    db: Session = Depends(get_db),
):
    """Turn off reservation conflict emails for the single task named in the token"""
    result = codec.verify(token)
    if not result.valid:
        if result.reason == REASON_EXPIRED:
            body = render_page(
                "Unsubscribe",
                "Link expired",
                "Please use the unsubscribe link from the latest email.",
            )
        else:
            body = render_page(
                "Unsubscribe",
                "Link expired or invalid",
                "Please request a new unsubscribe link from the latest email.",
            )
        return HTMLResponse(content=body, status_code=400)

    try:
        found = TaskConflictStateRepository(db).set_opted_out(result.task_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Unsubscribe failed for task {result.task_id}: {e}")
        return HTMLResponse(
            content=render_page("Error", "Something went wrong", "Please try again later."),
            status_code=500,
        )

    if not found:
        logger.warning(f"⚠️ Unsubscribe token for unknown task {result.task_id}")
        return HTMLResponse(
            content=render_page(
                "Unsubscribe", "Task not found", "This task no longer exists."
            ),
            status_code=404,
        )

    logger.info(f"🔕 Task {result.task_id} opted out of reservation conflict alerts")
    return HTMLResponse(
        content=render_page(
            "Unsubscribed",
            "Unsubscribed",
            "Reservation conflict notifications have been turned off for this task.",
        ),
        status_code=200,
    )


@router.post("/run", response_model=ConflictRunResponse)
async def trigger_conflict_run(
    now: datetime = Depends(get_now),
    service: ConflictNotificationService = Depends(get_conflict_service),
):
    """Run the reservation conflict check immediately"""
    summary = await service.process_once(now)
    return ConflictRunResponse(
        message="Reservation conflict notifier ran successfully.",
        checked=summary.checked,
        notified=summary.count(NOTIFIED),
        failed=sum(
            summary.count(status)
            for status in (FAILED, FEED_UNAVAILABLE, SEND_FAILED, NOTIFIED_NOT_RECORDED)
        ),
        outcomes=[
            ConflictOutcomeResponse(
                taskId=o.task_id, status=o.status, fingerprint=o.fingerprint, error=o.error
            )
            for o in summary.outcomes
        ],
    )
