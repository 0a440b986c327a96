"""
Unit tests for the SMTP mail transport (smtplib is patched out).
"""
import logging
import smtplib
import time

import pytest

from backend.app.core.exceptions import MailTransportError
from backend.app.services import mail_transport
from backend.app.services.mail_transport import SMTPConfig, SMTPMailTransport


class RecordingSMTP:
    """Stand-in for smtplib.SMTP that records the session."""
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls = []
        self.messages = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))

    def send_message(self, message):
        self.messages.append(message)


class RefusingSMTP(RecordingSMTP):
    def send_message(self, message):
        raise smtplib.SMTPRecipientsRefused({message["To"]: (550, b"mailbox unavailable")})


class StalledSMTP(RecordingSMTP):
    def send_message(self, message):
        time.sleep(0.5)
        self.messages.append(message)


CONFIG = SMTPConfig(host="smtp.hospital.example", port=2525, username="alerts@hospital.example", password="pw")


@pytest.fixture(autouse=True)
def reset_instances():
    RecordingSMTP.instances.clear()


@pytest.mark.asyncio
async def test_unconfigured_transport_reports_failure():
    transport = SMTPMailTransport(SMTPConfig())
    result = await transport.send("dpo@hospital.example", "Subject", "<p>body</p>")

    assert result.success is False
    assert result.message == "SMTP is not configured"


@pytest.mark.asyncio
async def test_send_builds_html_message(monkeypatch):
    monkeypatch.setattr(mail_transport.smtplib, "SMTP", RecordingSMTP)
    transport = SMTPMailTransport(CONFIG)

    result = await transport.send("dpo@hospital.example", "Breach alert", "<p>Incident #1</p>")

    assert result.success is True
    assert result.message_id
    smtp = RecordingSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.hospital.example", 2525)
    assert smtp.calls == ["starttls", ("login", "alerts@hospital.example")]

    message = smtp.messages[0]
    assert message["To"] == "dpo@hospital.example"
    assert message["Subject"] == "Breach alert"
    assert "Urology Patient Management System" in message["From"]
    html_part = message.get_body(preferencelist=("html",))
    assert "Incident #1" in html_part.get_content()


@pytest.mark.asyncio
async def test_smtp_error_raises_transport_error(monkeypatch):
    monkeypatch.setattr(mail_transport.smtplib, "SMTP", RefusingSMTP)
    transport = SMTPMailTransport(CONFIG)

    with pytest.raises(MailTransportError):
        await transport.send("nobody@hospital.example", "Subject", "<p>body</p>")


@pytest.mark.asyncio
async def test_send_timeout_is_logged_and_raised(monkeypatch, caplog):
    monkeypatch.setattr(mail_transport.smtplib, "SMTP", StalledSMTP)
    transport = SMTPMailTransport(CONFIG.model_copy(update={"timeout_seconds": 0.05}))

    with caplog.at_level(logging.ERROR, logger=mail_transport.__name__):
        with pytest.raises(MailTransportError, match="timed out"):
            await transport.send("dpo@hospital.example", "Subject", "<p>body</p>")

    assert any("timed out after 0.05s" in record.getMessage() for record in caplog.records)
