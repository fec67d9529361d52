import smtplib

from app.services.email_service import EmailService


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = None
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        self.logged_in = (username, password)

    def send_message(self, msg):
        self.sent.append(msg)


def _configured_service() -> EmailService:
    return EmailService(
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_username="mailer",
        smtp_password="pw",
        from_email="noreply@example.com",
        frontend_base_url="https://feedback.example.com/",
    )


def test_disabled_service_logs_code_and_reports_success(monkeypatch, caplog):
    FakeSMTP.instances.clear()
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    service = EmailService()
    assert service.enabled is False

    with caplog.at_level("WARNING"):
        assert service.send_verification_email("a@example.com", "alice", "123456") is True
    assert "123456" in caplog.text
    assert FakeSMTP.instances == []


def test_verification_email_contents(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)

    assert _configured_service().send_verification_email("a@example.com", "alice", "654321") is True

    smtp = FakeSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.example.com", 2525)
    assert smtp.logged_in == ("mailer", "pw")
    msg = smtp.sent[0]
    assert msg["To"] == "a@example.com"
    assert msg["Subject"] == "True Feedback | Verification code"
    text_part, html_part = msg.get_payload()
    text = text_part.get_payload(decode=True).decode("utf-8")
    html = html_part.get_payload(decode=True).decode("utf-8")
    assert "654321" in text
    assert "https://feedback.example.com/verify/alice" in text
    assert "654321" in html


def test_delivery_failure_reports_false(monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr(smtplib, "SMTP", refuse)

    assert _configured_service().send_verification_email("a@example.com", "alice", "654321") is False
