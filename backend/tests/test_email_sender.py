from __future__ import annotations

from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError

from edge_engage.services import email as email_service


def _settings(**overrides):
    values = {
        "EMAIL_ENABLED": True,
        "EMAIL_PROVIDER": "resend",
        "FROM_EMAIL": "noreply@edge.example.com",
        "RESEND_API_KEY": "re_test_123",
        "AWS_REGION": "",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


# ---------------------------------------------------------------------------
# Tests: build_email_sender()
# ---------------------------------------------------------------------------


def test_disabled_when_email_off():
    sender = email_service.build_email_sender(_settings(EMAIL_ENABLED=False))

    assert isinstance(sender, email_service.DisabledEmailSender)
    assert sender.enabled is False
    assert sender.send("to@example.com", "Subject", "Body") is None


@pytest.mark.parametrize(
    "overrides,reason",
    [
        ({"FROM_EMAIL": ""}, "FROM_EMAIL is not set"),
        ({"RESEND_API_KEY": "  "}, "RESEND_API_KEY is not set"),
        ({"EMAIL_PROVIDER": "ses", "AWS_REGION": ""}, "AWS_REGION is not set"),
    ],
)
def test_missing_credentials_give_disabled_sender(overrides, reason):
    sender = email_service.build_email_sender(_settings(**overrides))

    assert isinstance(sender, email_service.DisabledEmailSender)
    assert sender.reason == reason


def test_resend_sender():
    sender = email_service.build_email_sender(_settings())

    assert isinstance(sender, email_service.ResendEmailSender)
    assert sender.enabled is True
    assert sender.from_email == "noreply@edge.example.com"


def test_blank_provider_defaults_to_resend():
    sender = email_service.build_email_sender(_settings(EMAIL_PROVIDER=""))
    assert isinstance(sender, email_service.ResendEmailSender)


def test_ses_sender_is_lazy():
    sender = email_service.build_email_sender(_settings(EMAIL_PROVIDER="SES", AWS_REGION="us-east-1"))

    assert isinstance(sender, email_service.SesEmailSender)
    assert sender.region == "us-east-1"
    assert sender.client is None


def test_unknown_provider_is_config_error():
    with pytest.raises(email_service.EmailNotConfiguredError):
        email_service.build_email_sender(_settings(EMAIL_PROVIDER="carrier-pigeon"))


# ---------------------------------------------------------------------------
# Tests: delivery
# ---------------------------------------------------------------------------


def test_resend_send_returns_message_id(monkeypatch):
    captured = {}

    def _fake_send(params):
        captured.update(params)
        return {"id": " msg_123 "}

    monkeypatch.setattr(email_service.resend.Emails, "send", _fake_send)
    sender = email_service.ResendEmailSender(api_key="re_test", from_email="noreply@edge.example.com")

    assert sender.send("to@example.com", "Hi", "a < b") == "msg_123"
    assert captured["to"] == ["to@example.com"]
    assert captured["html"] == "<pre>a &lt; b</pre>"


def test_resend_failure_is_delivery_error(monkeypatch):
    def _fake_send(params):
        raise RuntimeError("network down")

    monkeypatch.setattr(email_service.resend.Emails, "send", _fake_send)
    sender = email_service.ResendEmailSender(api_key="re_test", from_email="noreply@edge.example.com")

    with pytest.raises(email_service.EmailDeliveryError):
        sender.send("to@example.com", "Hi", "Body")


def test_ses_send_uses_injected_client():
    class FakeSes:
        def __init__(self):
            self.calls = []

        def send_email(self, **kwargs):
            self.calls.append(kwargs)
            return {"MessageId": "ses-1"}

    client = FakeSes()
    sender = email_service.SesEmailSender(region="us-east-1", from_email="noreply@edge.example.com", client=client)

    assert sender.send("to@example.com", "Subject", "Body") == "ses-1"
    assert client.calls[0]["Destination"] == {"ToAddresses": ["to@example.com"]}
    assert client.calls[0]["Source"] == "noreply@edge.example.com"


def test_ses_client_error_is_delivery_error():
    class RejectingSes:
        def send_email(self, **kwargs):
            raise ClientError({"Error": {"Code": "MessageRejected", "Message": "nope"}}, "SendEmail")

    sender = email_service.SesEmailSender(
        region="us-east-1", from_email="noreply@edge.example.com", client=RejectingSes()
    )

    with pytest.raises(email_service.EmailDeliveryError) as exc:
        sender.send("to@example.com", "Subject", "Body")

    assert "MessageRejected" in str(exc.value)
