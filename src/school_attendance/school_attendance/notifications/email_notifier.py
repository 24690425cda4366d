from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape
from typing import Optional

from ..core.constants import DEFAULT_SMTP_PORT, DEFAULT_SMTP_TIMEOUT
from ..core.enums import AttendanceStatus
from .model import ChannelResult, NotificationPayload, NotificationResult
from .notifier import Notifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpSettings:
    host: str = ""
    port: int = DEFAULT_SMTP_PORT
    user: str = ""
    password: str = ""
    use_tls: bool = True
    mail_from: str = ""
    timeout: float = DEFAULT_SMTP_TIMEOUT

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.mail_from)

    @classmethod
    def from_settings(cls, settings) -> "SmtpSettings":
        user = str(getattr(settings, "SMTP_USER", "") or "")
        return cls(
            host=str(getattr(settings, "SMTP_HOST", "") or ""),
            port=int(getattr(settings, "SMTP_PORT", DEFAULT_SMTP_PORT)),
            user=user,
            # Gmail app passwords are often pasted with spaces.
            password=str(getattr(settings, "SMTP_PASSWORD", "") or "").replace(" ", ""),
            use_tls=bool(getattr(settings, "SMTP_USE_TLS", True)),
            mail_from=str(getattr(settings, "MAIL_FROM", "") or user),
            timeout=float(getattr(settings, "SMTP_TIMEOUT", DEFAULT_SMTP_TIMEOUT)),
        )


def format_day(payload: NotificationPayload) -> str:
    d = payload.day
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def status_label(status: AttendanceStatus) -> str:
    return status.value.capitalize()


class EmailNotifier(Notifier):
    """Sends attendance alerts over SMTP, one email per recipient."""

    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def notify(self, payload: NotificationPayload) -> NotificationResult:
        try:
            parent = self._send_to_parent(payload)
            student = self._send_to_student(payload)
            return NotificationResult(parent=parent, student=student)
        except Exception as e:
            logger.exception("Attendance notification for %s failed", payload.student_id)
            error = f"Failed to send attendance notification emails: {e}"
            return NotificationResult.all_failed(payload, error)

    def _send_to_parent(self, payload: NotificationPayload) -> ChannelResult:
        if not payload.parent_email:
            return ChannelResult.no_address()
        label = status_label(payload.status)
        message = self._build_message(
            to=payload.parent_email,
            subject=f"Attendance Alert: {payload.student_name} marked {label} in {payload.subject}",
            text=self._parent_text(payload),
            html=self._html(payload, recipient="parent"),
        )
        return self._deliver(message, recipient="parent")

    def _send_to_student(self, payload: NotificationPayload) -> ChannelResult:
        if not payload.student_email:
            return ChannelResult.no_address()
        label = status_label(payload.status)
        message = self._build_message(
            to=payload.student_email,
            subject=f"Attendance Alert: You were marked {label} in {payload.subject}",
            text=self._student_text(payload),
            html=self._html(payload, recipient="student"),
        )
        return self._deliver(message, recipient="student")

    def _build_message(self, *, to: str, subject: str, text: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._settings.mail_from
        message["To"] = to
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage, *, recipient: str) -> ChannelResult:
        s = self._settings
        if not s.is_configured:
            logger.warning("SMTP is not configured; %s alert to %s not sent", recipient, message["To"])
            return ChannelResult.failed("SMTP is not configured")

        try:
            with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as server:
                if s.use_tls:
                    server.starttls()
                if s.user and s.password:
                    server.login(s.user, s.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Attendance email to %s (%s) failed: %s", message["To"], recipient, e)
            return ChannelResult.failed(str(e))

        logger.info("Attendance notification email sent to %s (%s)", message["To"], recipient)
        return ChannelResult.ok()

    @staticmethod
    def _details(payload: NotificationPayload) -> str:
        lines = [
            f"Date: {format_day(payload)}",
            f"Class: {payload.class_label}",
            f"Subject: {payload.subject}",
        ]
        if payload.remarks:
            lines.append(f"Remarks: {payload.remarks}")
        return "\n".join(lines)

    def _parent_text(self, payload: NotificationPayload) -> str:
        label = status_label(payload.status)
        return (
            f"Dear {payload.parent_name or 'Parent'},\n\n"
            f"This is to inform you that your child, {payload.student_name} (ID: {payload.student_id}), "
            f"has been marked {label} for the following class:\n\n"
            f"{self._details(payload)}\n\n"
            "Please note that regular attendance is crucial for academic progress. If you have any "
            "concerns, please contact the class teacher or school administration.\n"
        )

    def _student_text(self, payload: NotificationPayload) -> str:
        label = status_label(payload.status)
        return (
            f"Dear {payload.student_name},\n\n"
            f"This is to inform you that you have been marked {label} for the following class:\n\n"
            f"{self._details(payload)}\n\n"
            f"If you believe this is an error or if you have a valid reason for your {label.lower()} "
            "status, please discuss this with your faculty or submit a leave application.\n"
        )

    @staticmethod
    def _html(payload: NotificationPayload, *, recipient: str) -> str:
        label = escape(status_label(payload.status))
        color = "#dc3545" if payload.status == AttendanceStatus.ABSENT else "#ffc107"
        badge = f'<span style="background:{color};color:#fff;padding:4px 8px;border-radius:4px">{label}</span>'
        if recipient == "parent":
            greeting = (
                f"<p>Dear {escape(payload.parent_name or 'Parent')},</p>"
                f"<p>This is to inform you that your child, <strong>{escape(payload.student_name)}</strong> "
                f"(ID: {escape(payload.student_id)}), has been marked {badge} for the following class:</p>"
            )
        else:
            greeting = (
                f"<p>Dear {escape(payload.student_name)},</p>"
                f"<p>This is to inform you that you have been marked {badge} for the following class:</p>"
            )
        remarks: Optional[str] = None
        if payload.remarks:
            remarks = f"<p><strong>Remarks:</strong> {escape(payload.remarks)}</p>"
        return (
            "<html><body>"
            "<h1>Attendance Notification</h1>"
            f"{greeting}"
            f"<p><strong>Date:</strong> {escape(format_day(payload))}</p>"
            f"<p><strong>Class:</strong> {escape(payload.class_label)}</p>"
            f"<p><strong>Subject:</strong> {escape(payload.subject)}</p>"
            f"{remarks or ''}"
            "</body></html>"
        )
