"""SendGrid delivery of notification emails and the per-user email coordinator."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from html import escape
from typing import Any

from anyio import to_thread
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.config import Settings, get_settings
from app.domain.entities import NOTIFICATION_CHANNEL_EMAIL
from app.infrastructure.repositories import (
    NotificationPreferenceRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        # Fall back to a JSON string for unrecognised payloads
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        try:
            return "; ".join(str(item) for item in parsed)
        except TypeError:
            return None

    return None


def _log_sendgrid_exception(exc: Exception) -> None:
    """Log a SendGrid API error with helpful troubleshooting details."""

    status_code = getattr(exc, "status_code", None)
    body = getattr(exc, "body", None)
    details = _extract_sendgrid_error_details(body)

    if status_code and details:
        logger.error(
            "SendGrid API request failed with status %s: %s", status_code, details
        )
    elif status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
    elif details:
        logger.error("SendGrid API request failed: %s", details)
    else:
        logger.exception("Error sending email via SendGrid: %s", exc)


def _log_unsuccessful_response(response: Any) -> None:
    """Log details from an unsuccessful SendGrid response object."""

    status_code = getattr(response, "status_code", None)
    body = getattr(response, "body", None)
    details = _extract_sendgrid_error_details(body)

    if details:
        logger.error(
            "SendGrid API responded with status %s: %s", status_code, details
        )
    else:
        logger.error("SendGrid API responded with status %s", status_code)


def send_email(
    subject: str, html_content: str, recipient: str, settings: Settings | None = None
) -> bool:
    """Send an email using the given or the configured SendGrid credentials."""

    settings = settings or get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        _log_sendgrid_exception(exc)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_unsuccessful_response(response)
        return False

    return True


def render_notification_email(
    context: Mapping[str, Any], site_name: str, site_url: str | None = None
) -> str:
    """Build the HTML body for a notification email from its payload context."""

    title = escape(str(context.get("title") or site_name))
    body = escape(str(context.get("body") or ""))
    parts = [f"<h2>{title}</h2>", f"<p>{body}</p>"]
    link = context.get("url")
    if link and site_url and str(link).startswith("/"):
        link = site_url.rstrip("/") + str(link)
    if link:
        href = escape(str(link), quote=True)
        parts.append(f'<p><a href="{href}">View on {escape(site_name)}</a></p>')
    parts.append(
        "<p style=\"color:#888;font-size:12px\">"
        "You can change which emails you receive in your notification settings."
        "</p>"
    )
    return "".join(parts)


class EmailNotificationService:
    """Send notification emails to users who opted in and verified their address."""

    def __init__(
        self,
        users: UserRepository,
        preferences: NotificationPreferenceRepository,
        settings: Settings | None = None,
    ) -> None:
        self._users = users
        self._preferences = preferences
        self._settings = settings or get_settings()
        self._background: set[asyncio.Task[bool]] = set()

    async def send_notification_email(
        self,
        user_id: str,
        event_name: str,
        context: Mapping[str, Any],
        skip_queue: bool = False,
        contractor_id: str | None = None,
    ) -> bool:
        """Send the email for ``event_name`` to ``user_id``.

        Returns ``False`` when the user has no verified address, the email
        preference is disabled, or SendGrid is not configured.
        """

        user = await self._users.get(user_id)
        if user is None or not user.email:
            logger.debug("User %s has no email address; skipping %s", user_id, event_name)
            return False
        if not user.email_verified:
            logger.debug("User %s email is not verified; skipping %s", user_id, event_name)
            return False

        enabled = await self._preferences.is_enabled_for_action(
            user_id, event_name, NOTIFICATION_CHANNEL_EMAIL, contractor_id
        )
        if not enabled:
            return False

        settings = self._settings
        if not (settings.sendgrid_api_key and settings.sendgrid_sender):
            logger.info("SendGrid configuration incomplete; skipping email delivery")
            return False

        subject = f"{context.get('title') or event_name} | {settings.site_name}"
        html_content = render_notification_email(context, settings.site_name, settings.site_url)

        if settings.email_background_delivery and not skip_queue:
            task = asyncio.get_running_loop().create_task(
                to_thread.run_sync(send_email, subject, html_content, user.email, settings)
            )
            self._background.add(task)
            task.add_done_callback(self._background.discard)
            return True

        return await to_thread.run_sync(
            send_email, subject, html_content, user.email, settings
        )


__all__ = [
    "EmailNotificationService",
    "render_notification_email",
    "send_email",
]
