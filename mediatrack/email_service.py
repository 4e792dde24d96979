"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from datetime import datetime
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import reservation_conflict_template

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors'
        if isinstance(result, dict) or hasattr(result, "get"):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    text: Optional[str] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        text: Optional plain-text alternative
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        email_data = {
            "from": from_address or EMAIL_FROM_ADDRESS,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
        if text:
            email_data["text"] = text

        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


def format_ymd(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d")


async def send_reservation_conflict_email(
    to: list[str],
    property_name: str,
    update_type: str,
    scheduled_start: Optional[datetime],
    scheduled_end: Optional[datetime],
    task_link: str,
    unsubscribe_url: Optional[str],
) -> dict:
    """Notify the photographer and scheduler that a reservation overlaps their shoot"""
    shooting_date_range = (
        f"{format_ymd(scheduled_start or scheduled_end)} to {format_ymd(scheduled_end or scheduled_start)}"
    )
    mjml_content = reservation_conflict_template(
        property_name=property_name,
        update_type=update_type,
        shooting_date_range=shooting_date_range,
        task_link=task_link,
        unsubscribe_url=unsubscribe_url,
    )
    text = (
        "A reservation has been made during an assigned shooting date\n\n"
        f"Property: {property_name}\n"
        f"Update Type: {update_type}\n"
        f"Shooting Date: {shooting_date_range}\n"
        f"Task Link: {task_link}\n\n"
        "Want to turn off this notification for this task? "
        f"{unsubscribe_url or '(unsub link unavailable)'}"
    )
    return await send_email(
        to=to,
        subject="Reservation conflict during assigned shooting date",
        mjml_content=mjml_content,
        text=text,
    )
