"""
Unit tests for the mailers. smtplib.SMTP is replaced with a recorder.
"""

import asyncio
import smtplib

import pytest

from vidsum.infrastructure.email import client as email_client
from vidsum.infrastructure.email.client import (
    EmailError,
    LoggingMailer,
    SmtpConfig,
    SmtpMailer,
    create_email_client,
)


class RecordingSMTP:
    instances: list["RecordingSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        self.sent = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username, password))

    def send_message(self, message):
        self.sent.append(message)


class RefusingSMTP(RecordingSMTP):
    def send_message(self, message):
        raise smtplib.SMTPRecipientsRefused({message["To"]: (550, b"no such user")})


@pytest.fixture(autouse=True)
def reset_instances():
    RecordingSMTP.instances = []


class TestSmtpMailer:
    def test_sends_plain_text_with_tls_and_login(self, monkeypatch):
        monkeypatch.setattr(email_client.smtplib, "SMTP", RecordingSMTP)
        mailer = SmtpMailer(SmtpConfig(host="smtp.test", username="mailer", password="pw", sender="from@test"))

        asyncio.run(mailer.send("to@test", "Email Verification OTP", "Your OTP is: 123456."))

        server = RecordingSMTP.instances[0]
        assert (server.host, server.port) == ("smtp.test", 587)
        assert server.calls == ["starttls", ("login", "mailer", "pw")]
        message = server.sent[0]
        assert message["From"] == "from@test"
        assert message["To"] == "to@test"
        assert message["Subject"] == "Email Verification OTP"
        assert "123456" in message.get_content()

    def test_anonymous_relay_without_tls(self, monkeypatch):
        monkeypatch.setattr(email_client.smtplib, "SMTP", RecordingSMTP)
        mailer = SmtpMailer(SmtpConfig(host="localhost", port=25, use_tls=False))

        asyncio.run(mailer.send("to@test", "Subject", "Body"))

        assert RecordingSMTP.instances[0].calls == []

    def test_smtp_failure_raises_email_error(self, monkeypatch):
        monkeypatch.setattr(email_client.smtplib, "SMTP", RefusingSMTP)
        mailer = SmtpMailer(SmtpConfig(host="smtp.test"))

        with pytest.raises(EmailError):
            asyncio.run(mailer.send("to@test", "Subject", "Body"))


class TestLoggingMailer:
    def test_keeps_messages_in_outbox(self):
        mailer = LoggingMailer()
        asyncio.run(mailer.send("a@test", "First", "1"))
        asyncio.run(mailer.send("b@test", "Other", "2"))
        asyncio.run(mailer.send("a@test", "Second", "3"))

        assert len(mailer.outbox) == 3
        assert mailer.last_to("a@test").subject == "Second"
        assert mailer.last_to("nobody@test") is None

    def test_factory(self):
        assert isinstance(create_email_client(mock_mode=True), LoggingMailer)
        assert isinstance(create_email_client(SmtpConfig(host="smtp.test")), SmtpMailer)
        with pytest.raises(ValueError):
            create_email_client()
