import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import List, Optional

import requests

from playtime_monitor import config
from playtime_monitor.services.exceptions import DispatchError
from playtime_monitor.utils.constants import LIMIT_WINDOW_WEEKS

logger = logging.getLogger(__name__)

CHANNEL_EMAIL = "email"
CHANNEL_DISCORD = "discord"


@dataclass
class DispatchResult:
    sent: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class MessageManager:
    """Renders limit notifications and delivers them by email and Discord webhook."""

    def __init__(
        self,
        email_host: Optional[str] = None,
        email_port: Optional[int] = None,
        email_user: Optional[str] = None,
        email_password: Optional[str] = None,
        email_from: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.email_host = config.EMAIL_HOST if email_host is None else email_host
        self.email_port = config.EMAIL_PORT if email_port is None else email_port
        self.email_user = config.EMAIL_USER if email_user is None else email_user
        self.email_password = config.EMAIL_PASS if email_password is None else email_password
        self.email_from = config.EMAIL_FROM if email_from is None else email_from
        self.timeout = config.HTTP_TIMEOUT_SECONDS if timeout is None else timeout

    @staticmethod
    def construct_message(child_name: str, total_minutes: int, limit_hours: int):
        # Subject, email body and Discord text for one over-limit child
        total_hours = f"{total_minutes / 60:.2f}"
        window_limit_hours = limit_hours * LIMIT_WINDOW_WEEKS

        subject = f"Playtime limit exceeded: {child_name}"

        body = (
            "Dear parent,\n\n"
            f"{child_name} has played more than the configured limit over the last two weeks "
            f"({window_limit_hours} hours, {limit_hours} hours per week).\n\n"
            f"Total playtime: {total_hours} hours ({total_minutes} minutes)\n"
        )

        discord_text = (
            ":bell: **Playtime alert!** :bell:\n"
            f"{child_name} is over the limit ({limit_hours} h/week).\n"
            f"**Total playtime:** {total_hours} hours"
        )

        return {"subject": subject, "body": body, "discord": discord_text}

    def send_email(self, recipient: str, subject: str, body: str) -> None:
        if not self.email_host:
            raise DispatchError(CHANNEL_EMAIL, "EMAIL_HOST is not configured")

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = f"Steam Playtime Monitor <{self.email_from}>"
        message["To"] = recipient
        message.set_content(body)

        try:
            if self.email_port == 465:
                with smtplib.SMTP_SSL(self.email_host, self.email_port, timeout=self.timeout) as smtp:
                    self._login(smtp)
                    smtp.send_message(message)
            else:
                with smtplib.SMTP(self.email_host, self.email_port, timeout=self.timeout) as smtp:
                    smtp.starttls()
                    self._login(smtp)
                    smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchError(CHANNEL_EMAIL, f"SMTP delivery failed: {e}") from e

        logger.info(f"Notification email sent to {recipient}")

    def _login(self, smtp) -> None:
        if self.email_user and self.email_password:
            smtp.login(self.email_user, self.email_password)

    def send_discord_notification(self, webhook_url: str, message: str) -> None:
        if not webhook_url:
            raise DispatchError(CHANNEL_DISCORD, "No Discord webhook URL provided")

        try:
            # Discord webhooks expect a JSON payload with a 'content' field
            response = requests.post(webhook_url, json={"content": message}, timeout=self.timeout)
        except requests.RequestException as e:
            raise DispatchError(CHANNEL_DISCORD, f"HTTP request failed: {e}") from e

        if response.status_code >= 400:
            raise DispatchError(
                CHANNEL_DISCORD,
                f"Webhook returned HTTP {response.status_code}: {response.text[:200]}",
            )

        logger.info("Discord notification sent")

    def dispatch(self, contact, child_name: str, total_minutes: int, limit_hours: int) -> DispatchResult:
        """Send to every channel the parent configured.

        A failing channel is logged and recorded in the result; it never stops
        the other channel and never raises.
        """
        msg = self.construct_message(child_name, total_minutes, limit_hours)
        result = DispatchResult()

        if contact.email:
            try:
                self.send_email(contact.email, msg["subject"], msg["body"])
                result.sent.append(CHANNEL_EMAIL)
            except Exception as e:
                logger.warning(f"Email notification to parent {contact.user_id} failed: {e}")
                result.failed.append(CHANNEL_EMAIL)

        if contact.discord_webhook_url:
            try:
                self.send_discord_notification(contact.discord_webhook_url, msg["discord"])
                result.sent.append(CHANNEL_DISCORD)
            except Exception as e:
                logger.warning(f"Discord notification to parent {contact.user_id} failed: {e}")
                result.failed.append(CHANNEL_DISCORD)

        return result
