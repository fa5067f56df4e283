# tests/test_email_service.py
# Unit tests for password reset emails

from streamify.services import email_service


class FakeSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False

    def starttls(self, context=None):
        pass

    def login(self, user, password):
        pass

    def send_message(self, msg):
        FakeSMTP.sent.append(msg)


def test_template_contains_name_and_otp():
    html = email_service.forgot_password_template("Alice", "654321", 60)
    assert "Dear Alice," in html
    assert "654321" in html
    assert "60 minutes" in html


def test_send_fails_without_smtp_host():
    assert email_service.send_password_reset_email("alice@example.com", "Alice", "654321") is False


def test_send_password_reset_email(monkeypatch):
    FakeSMTP.sent = []
    monkeypatch.setattr(email_service, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(email_service.smtplib, "SMTP", FakeSMTP)

    assert email_service.send_password_reset_email("alice@example.com", "Alice", "654321") is True

    msg = FakeSMTP.sent[0]
    assert msg["To"] == "alice@example.com"
    assert msg["Subject"] == "Streamify Password Reset OTP"
    assert "654321" in msg.get_body(preferencelist=("html",)).get_content()
