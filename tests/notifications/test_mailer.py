import smtplib

import pytest

from kindergarten.core.exceptions import NotificationError
from kindergarten.notifications import mailer as mailer_module
from kindergarten.notifications.mailer import SmtpMailer, SmtpSettings


def test_missing_credentials_raise_notification_error():
    with pytest.raises(NotificationError) as exc:
        SmtpMailer(SmtpSettings(host="smtp.test")).send(to="p@example.com", subject="s", text="t")
    assert exc.value.status_code == 502


def test_message_uses_fixed_sender_identity():
    msg = SmtpMailer(SmtpSettings(host="smtp.test", user="kg@example.com", password="pw")).build_message(
        to="p@example.com", subject="Hello", text="Body"
    )
    assert msg["From"] == "Kindergarten <kg@example.com>"
    assert msg["To"] == "p@example.com"
    assert msg.get_content().strip() == "Body"


def test_smtp_failure_is_wrapped(monkeypatch):
    class BrokenSMTP:
        def __init__(self, *args, **kwargs):
            raise smtplib.SMTPConnectError(421, "down")

    monkeypatch.setattr(mailer_module.smtplib, "SMTP_SSL", BrokenSMTP)

    with pytest.raises(NotificationError):
        SmtpMailer(SmtpSettings(host="smtp.test", user="kg@example.com", password="pw")).send(
            to="p@example.com", subject="s", text="t"
        )


def test_successful_send_logs_in_and_sends(monkeypatch):
    sent = []

    class FakeSMTP:
        def __init__(self, host, port, timeout=None, context=None):
            sent.append(("connect", host, port))

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def login(self, user, password):
            sent.append(("login", user))

        def send_message(self, msg):
            sent.append(("send", msg["To"]))

    monkeypatch.setattr(mailer_module.smtplib, "SMTP_SSL", FakeSMTP)

    SmtpMailer(SmtpSettings(host="smtp.test", user="kg@example.com", password="pw")).send(
        to="p@example.com", subject="s", text="t"
    )
    assert sent == [("connect", "smtp.test", 465), ("login", "kg@example.com"), ("send", "p@example.com")]
