"""
Outbound email for one-time codes.

SmtpMailer sends plain-text messages through any SMTP relay. LoggingMailer
is the mock-mode stand-in: it logs each message and keeps it in `outbox`,
which is how tests read the codes that would have been emailed.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when a message could not be handed to the mail server."""
    pass


@dataclass
class SmtpConfig:
    host: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    sender: str = "no-reply@vidsum.local"
    use_tls: bool = True
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class SentEmail:
    to: str
    subject: str
    text: str


class EmailClient(Protocol):
    async def send(self, to: str, subject: str, text: str) -> None: ...


class SmtpMailer:
    def __init__(self, config: SmtpConfig) -> None:
        self._config = config
        logger.info(
            "Initialized SMTP mailer",
            extra={"host": config.host, "port": config.port, "tls": config.use_tls}
        )

    async def send(self, to: str, subject: str, text: str) -> None:
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._send, to, subject, text)

    def _send(self, to: str, subject: str, text: str) -> None:
        message = EmailMessage()
        message["From"] = self._config.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)

        try:
            with smtplib.SMTP(
                self._config.host,
                self._config.port,
                timeout=self._config.timeout_seconds,
            ) as server:
                if self._config.use_tls:
                    server.starttls()
                if self._config.username:
                    server.login(self._config.username, self._config.password or "")
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Failed to send email",
                extra={"subject": subject, "error": str(e)}
            )
            raise EmailError(f"Email delivery failed: {e}") from e

        logger.info("Email sent", extra={"subject": subject})


class LoggingMailer:
    """Mock-mode mailer. Nothing leaves the process."""

    def __init__(self) -> None:
        self.outbox: list[SentEmail] = []
        logger.info("Initialized logging mailer (emails are not delivered)")

    async def send(self, to: str, subject: str, text: str) -> None:
        self.outbox.append(SentEmail(to=to, subject=subject, text=text))
        logger.info("Email captured", extra={"to": to, "subject": subject})

    def last_to(self, to: str) -> Optional[SentEmail]:
        """Most recent message addressed to `to`, if any."""
        for message in reversed(self.outbox):
            if message.to == to:
                return message
        return None


def create_email_client(
    config: Optional[SmtpConfig] = None,
    mock_mode: bool = False,
) -> EmailClient:
    if mock_mode:
        return LoggingMailer()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return SmtpMailer(config)
