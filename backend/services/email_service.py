"""Email service for sending transactional emails.

Providers:
- console: Logs emails (development and tests)
- smtp: Standard SMTP delivery

Every send is best effort: the attempt and its outcome are logged, failures
return False and never raise. Template variables are HTML-escaped.
"""

import html
import re
import smtplib
from abc import ABC, abstractmethod
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from loguru import logger

from models.config import settings


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send an email. Returns True when the provider accepted it."""
        pass


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    def __init__(self) -> None:
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME
        self.use_tls = settings.SMTP_USE_TLS
        self.use_ssl = settings.SMTP_USE_SSL

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port)
        server = smtplib.SMTP(self.host, self.port)
        if self.use_tls:
            server.starttls()
        return server

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send email via SMTP (implicit SSL on 465 or STARTTLS on 587)."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            server = self._connect()
            try:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to_email, msg.as_string())
            finally:
                server.quit()
            return True
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP: Recipients refused - {e.recipients}")
            return False
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP: Authentication failed - {e.smtp_code}: {e.smtp_error}")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP: Failed to send email to {to_email}: {e}")
            return False


class ConsoleProvider(EmailProvider):
    """Console email provider for development/testing."""

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        clean_html = re.sub(r"<[^>]+>", "", html_body)[:300]
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (console provider)\n"
            f"To: {to_email}\n"
            f"Subject: {subject}\n"
            f"{'-' * 60}\n"
            f"{text_body}\n"
            f"{'-' * 60}\n"
            f"HTML (preview): {clean_html}\n"
            f"{'=' * 60}"
        )
        return True


def get_email_provider() -> EmailProvider:
    """Get the configured email provider."""
    provider_name = settings.EMAIL_PROVIDER.lower()

    if provider_name == "smtp":
        return SMTPProvider()
    elif provider_name == "console":
        return ConsoleProvider()
    else:
        logger.warning(f"Unknown email provider '{provider_name}', using console")
        return ConsoleProvider()


STATUS_MESSAGES = {
    "pending": "Your complaint is waiting to be reviewed by the city team.",
    "in-progress": "Work on your complaint has started.",
    "completed": "Your complaint has been resolved. Thank you for helping your city!",
    "rejected": "Your complaint could not be acted upon.",
}


class EmailService:
    """High-level email service with inline templates."""

    @staticmethod
    def _wrap_html(title: str, body_html: str) -> str:
        return f"""<!DOCTYPE html>
<html><head><meta charset="UTF-8"></head>
<body style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
<h2 style="color: #333;">{html.escape(title)}</h2>
{body_html}
<p style="color: #666; font-size: 13px;">{html.escape(settings.PROJECT_NAME)} &middot; {datetime.now().year}</p>
</body></html>"""

    @classmethod
    def _deliver(
        cls,
        kind: str,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send through the configured provider and log the attempt."""
        try:
            delivered = get_email_provider().send(
                to_email, subject, html_body, text_body
            )
        except Exception as e:
            logger.error(f"Email provider raised while sending {kind}: {e}")
            delivered = False

        log = logger.info if delivered else logger.warning
        log(f"Email attempt: kind={kind} to={to_email} delivered={delivered}")
        return delivered

    @classmethod
    def send_welcome(cls, to_email: str, name: str) -> bool:
        app = settings.PROJECT_NAME
        safe_name = html.escape(name)
        text = (
            f"Hello {name},\n\n"
            f"Welcome to {app}! You can now report civic issues in your area, "
            "vote on complaints that matter to you and follow their resolution.\n\n"
            f"Get started: {settings.APP_URL}\n"
        )
        body = (
            f"<p>Hello {safe_name},</p>"
            f"<p>Welcome to {html.escape(app)}! You can now report civic issues in "
            "your area, vote on complaints that matter to you and follow their "
            "resolution.</p>"
            f'<p><a href="{html.escape(settings.APP_URL)}">Get started</a></p>'
        )
        return cls._deliver(
            "welcome", to_email, f"Welcome to {app}", cls._wrap_html("Welcome", body), text
        )

    @classmethod
    def send_complaint_submitted(
        cls, to_email: str, name: str, complaint_id: int, title: str
    ) -> bool:
        link = f"{settings.APP_URL}/complaints/{complaint_id}"
        text = (
            f"Hello {name},\n\n"
            f'Your complaint "{title}" has been received (reference #{complaint_id}).\n'
            "We will email you when its status changes.\n\n"
            f"Track it here: {link}\n"
        )
        body = (
            f"<p>Hello {html.escape(name)},</p>"
            f"<p>Your complaint <strong>{html.escape(title)}</strong> has been "
            f"received (reference #{complaint_id}).</p>"
            "<p>We will email you when its status changes.</p>"
            f'<p><a href="{html.escape(link)}">Track your complaint</a></p>'
        )
        return cls._deliver(
            "complaint_submitted",
            to_email,
            "Complaint received",
            cls._wrap_html("Complaint received", body),
            text,
        )

    @classmethod
    def send_status_update(
        cls,
        to_email: str,
        name: str,
        complaint_id: int,
        title: str,
        status: str,
        admin_notes: str | None = None,
    ) -> bool:
        message = STATUS_MESSAGES.get(status, "")
        link = f"{settings.APP_URL}/complaints/{complaint_id}"
        notes_text = f"\nNote from the city team: {admin_notes}\n" if admin_notes else ""
        text = (
            f"Hello {name},\n\n"
            f'The status of your complaint "{title}" is now: {status}.\n'
            f"{message}\n{notes_text}\n"
            f"Details: {link}\n"
        )
        notes_html = (
            f"<p><em>Note from the city team:</em> {html.escape(admin_notes)}</p>"
            if admin_notes
            else ""
        )
        body = (
            f"<p>Hello {html.escape(name)},</p>"
            f"<p>The status of your complaint <strong>{html.escape(title)}</strong> "
            f"is now <strong>{html.escape(status)}</strong>.</p>"
            f"<p>{html.escape(message)}</p>{notes_html}"
            f'<p><a href="{html.escape(link)}">View details</a></p>'
        )
        return cls._deliver(
            "status_update",
            to_email,
            f"Complaint update: {status}",
            cls._wrap_html("Complaint status updated", body),
            text,
        )

    @classmethod
    def send_long_pending_report(
        cls,
        to_email: str,
        complaint_id: int,
        title: str,
        status: str,
        age_days: int,
        reported_by: str,
    ) -> bool:
        link = f"{settings.APP_URL}/admin/complaints/{complaint_id}"
        text = (
            f"Complaint #{complaint_id} \"{title}\" has been unresolved for "
            f"{age_days} days (status: {status}).\n"
            f"Reported by admin {reported_by}.\n\n"
            f"Review it here: {link}\n"
        )
        body = (
            f"<p>Complaint #{complaint_id} <strong>{html.escape(title)}</strong> has "
            f"been unresolved for <strong>{age_days} days</strong> "
            f"(status: {html.escape(status)}).</p>"
            f"<p>Reported by admin {html.escape(reported_by)}.</p>"
            f'<p><a href="{html.escape(link)}">Review complaint</a></p>'
        )
        return cls._deliver(
            "long_pending_report",
            to_email,
            f"Long-pending complaint #{complaint_id}",
            cls._wrap_html("Long-pending complaint", body),
            text,
        )
