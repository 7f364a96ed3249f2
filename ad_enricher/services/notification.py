from __future__ import annotations

import logging
import os
import smtplib
from dataclasses import dataclass
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from pathlib import Path

from ..models.config_models import SmtpConfig

"""Mail notification (SMTP).

Sends the HTML summary with the output workbook attached. Script admins are
copied on every mail and are the only recipients of FAILURE mails.
No retries: a delivery failure raises MailError.
"""

logger = logging.getLogger(__name__)


class MailError(Exception):
    """Raised when a mail could not be delivered."""


@dataclass(frozen=True)
class MailMessage:
    subject: str
    html_body: str
    to: tuple[str, ...]
    cc: tuple[str, ...] = ()
    attachments: tuple[Path, ...] = ()
    high_priority: bool = False

    @property
    def recipients(self) -> list[str]:
        return list(dict.fromkeys([*self.to, *self.cc]))


def wrap_html(subject: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>{escape(subject)}</title></head>\n<body>\n<h3>{escape(subject)}</h3>\n{body}\n</body></html>\n"
    )


class Mailer:
    """SMTP sender.

    SMTP_USER / SMTP_PASSWORD from the environment take precedence over the
    config values; no login is attempted when neither is set.
    """

    def __init__(self, cfg: SmtpConfig) -> None:
        self.cfg = cfg

    def build(self, message: MailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("mixed")
        msg["Subject"] = message.subject
        msg["From"] = self.cfg.from_address
        msg["To"] = ", ".join(message.to)
        if message.cc:
            msg["Cc"] = ", ".join(message.cc)
        if message.high_priority:
            msg["X-Priority"] = "1"
            msg["Importance"] = "High"

        msg.attach(MIMEText(wrap_html(message.subject, message.html_body), "html", "utf-8"))
        for path in message.attachments:
            part = MIMEApplication(path.read_bytes(), Name=path.name)
            part["Content-Disposition"] = f'attachment; filename="{path.name}"'
            msg.attach(part)
        return msg

    def send(self, message: MailMessage) -> None:
        user = os.getenv("SMTP_USER") or self.cfg.user
        password = os.getenv("SMTP_PASSWORD") or self.cfg.password
        try:
            mime = self.build(message)
            server = smtplib.SMTP(self.cfg.host, self.cfg.port)
            try:
                if self.cfg.use_tls:
                    server.starttls()
                if user and password:
                    server.login(user, password)
                server.sendmail(self.cfg.from_address, message.recipients, mime.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            raise MailError(f"failed to send mail '{message.subject}': {e}") from e
        logger.info(f"mail sent subject='{message.subject}' to={','.join(message.recipients)}")


def save_mail_copy(path: Path, message: MailMessage) -> Path:
    """Save the HTML body of a sent mail next to the run log."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(wrap_html(message.subject, message.html_body), encoding="utf-8")
    return path
