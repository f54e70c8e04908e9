"""Utility helpers for notification templating and formatting."""

from __future__ import annotations

import html
import re
from datetime import datetime, timezone
from string import Template

from formrelay.core.constants import RESERVED_FIELD_PREFIX
from formrelay.models.form_config import FormConfig

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

SUBJECT_TEMPLATE = Template("New $form submission")

NOTIFICATION_HTML_TEMPLATE = Template(
    """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>$title</title>
</head>
<body style="font-family: Arial, sans-serif; color: #222;">
  <h2 style="margin-bottom: 4px;">$title</h2>
  <p style="color: #666; margin-top: 0;">Received $timestamp</p>
  <table cellpadding="8" cellspacing="0" style="border-collapse: collapse; width: 100%;">
$rows
  </table>
</body>
</html>"""
)

NOTIFICATION_ROW_TEMPLATE = Template(
    """    <tr>
      <th align="left" valign="top" style="border-bottom: 1px solid #eee; width: 30%;">$label</th>
      <td style="border-bottom: 1px solid #eee;">$value</td>
    </tr>"""
)

NOTIFICATION_TEXT_TEMPLATE = Template(
    """$title
Received $timestamp

$fields
"""
)

THANK_YOU_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Thank You</title>
  <style>
    body { font-family: Arial, sans-serif; text-align: center; padding: 50px; }
    .success { color: #28a745; font-size: 24px; margin-bottom: 20px; }
  </style>
</head>
<body>
  <div class="success">Thank you! Your message has been sent successfully.</div>
  <p>We'll get back to you soon.</p>
</body>
</html>
"""


def humanize_field_name(name: str) -> str:
    """``firstName`` -> ``First Name``."""
    label = _CAMEL_BOUNDARY.sub(" ", name)
    return label[:1].upper() + label[1:]


def visible_fields(submission: dict[str, str]) -> list[tuple[str, str]]:
    return [
        (key, value)
        for key, value in submission.items()
        if not key.startswith(RESERVED_FIELD_PREFIX)
    ]


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%B %d, %Y at %H:%M:%S UTC")


def render_subject(form_name: str, config: FormConfig | None) -> str:
    if config is not None and config.subject:
        return config.subject
    return SUBJECT_TEMPLATE.substitute(form=form_name)


def render_notification(
    submission: dict[str, str],
    form_name: str,
    config: FormConfig | None,
    now: datetime | None = None,
) -> tuple[str, str]:
    """Return HTML and plain-text bodies for a submission notification."""
    moment = now or datetime.now(timezone.utc)
    display_name = config.name if config is not None and config.name else form_name
    title = f"New submission: {display_name}"
    timestamp = format_timestamp(moment)
    fields = visible_fields(submission)

    rows = "\n".join(
        NOTIFICATION_ROW_TEMPLATE.substitute(
            label=html.escape(humanize_field_name(key)),
            value=html.escape(value).replace("\r\n", "\n").replace("\n", "<br>\n"),
        )
        for key, value in fields
    )
    html_body = NOTIFICATION_HTML_TEMPLATE.substitute(
        title=html.escape(title),
        timestamp=html.escape(timestamp),
        rows=rows,
    )

    text_fields = "\n\n".join(f"{humanize_field_name(key)}:\n{value}" for key, value in fields)
    text_body = NOTIFICATION_TEXT_TEMPLATE.substitute(
        title=title,
        timestamp=timestamp,
        fields=text_fields or "(no fields submitted)",
    )
    return html_body, text_body


def render_thank_you_page() -> str:
    return THANK_YOU_PAGE
