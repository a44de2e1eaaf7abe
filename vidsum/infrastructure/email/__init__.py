"""
Outbound email (SMTP), with a logging mailer for mock mode.
"""

from .client import (
    EmailClient,
    EmailError,
    LoggingMailer,
    SentEmail,
    SmtpConfig,
    SmtpMailer,
    create_email_client,
)

__all__ = [
    "EmailClient",
    "EmailError",
    "LoggingMailer",
    "SentEmail",
    "SmtpConfig",
    "SmtpMailer",
    "create_email_client",
]
