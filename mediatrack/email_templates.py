"""
MJML Email Templates
Email templates using MJML for responsive, cross-client compatibility
"""

from html import escape
from typing import Optional

THEME = {
    "primary": "#3b82f6",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "warning": "#f97316",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    footer_html: str = "",
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="14px 32px"
              font-size="15px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
<mjml>
  <mj-head>
    <mj-title>{title}</mj-title>
    <mj-preview>{preview_text}</mj-preview>
    <mj-attributes>
      <mj-all font-family="system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif" />
      <mj-text color="{THEME['text_secondary']}" font-size="15px" line-height="1.6" />
    </mj-attributes>
  </mj-head>
  <mj-body background-color="{THEME['background']}">
    <mj-section background-color="{THEME['card_bg']}" border-radius="12px" padding="28px 24px">
      <mj-column>
        <mj-text font-size="20px" font-weight="700" color="{THEME['text_primary']}">{title}</mj-text>
        {content_sections}
      </mj-column>
    </mj-section>
    {cta_section}
    <mj-section padding="0 24px">
      <mj-column>
        <mj-text font-size="12px" color="{THEME['text_muted']}" align="center">{footer_html}</mj-text>
      </mj-column>
    </mj-section>
  </mj-body>
</mjml>
"""


def reservation_conflict_template(
    property_name: str,
    update_type: str,
    shooting_date_range: str,
    task_link: str,
    unsubscribe_url: Optional[str],
) -> str:
    """A reservation was made during an assigned shooting date"""
    content = f"""
        <mj-text>A reservation has been made during an assigned shooting date.</mj-text>
        <mj-divider border-color="{THEME['border']}" border-width="1px" />
        <mj-text>
          <strong>Property:</strong> {escape(property_name or '-')}<br/>
          <strong>Update Type:</strong> {escape(update_type or '-')}<br/>
          <strong>Shooting Date:</strong> {escape(shooting_date_range)}
        </mj-text>
    """

    if unsubscribe_url:
        footer = (
            "Want to turn off this notification for this task? "
            f'<a href="{escape(unsubscribe_url)}" style="color:{THEME["text_muted"]}">Unsubscribe</a>'
        )
    else:
        footer = "Want to turn off this notification for this task? (unsub link unavailable)"

    return get_base_template(
        title="Reservation conflict",
        preview_text="A reservation now overlaps a scheduled shoot",
        content_sections=content,
        cta_url=task_link,
        cta_label="Open Task",
        footer_html=footer,
    )
