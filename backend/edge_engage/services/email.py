from __future__ import annotations

import logging
from dataclasses import dataclass
from html import escape as html_escape
from typing import Any, Protocol

import boto3
import resend
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError, NoCredentialsError

from edge_engage.core.config import Settings

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(RuntimeError):
    pass


class EmailDeliveryError(RuntimeError):
    """
    Raised when a provider is configured but delivery fails.
    Message should be safe to surface to clients in dev.
    """


class EmailSender(Protocol):
    enabled: bool

    def send(self, to_email: str, subject: str, body: str) -> str | None:
        ...


@dataclass
class DisabledEmailSender:
    """Stands in when email is turned off or credentials are missing; delivery is skipped."""

    reason: str
    enabled: bool = False

    def send(self, to_email: str, subject: str, body: str) -> str | None:
        logger.warning("Email delivery disabled (%s); skipped message to=%s subject=%r", self.reason, to_email, subject)
        return None


@dataclass
class ResendEmailSender:
    api_key: str
    from_email: str
    enabled: bool = True

    def send(self, to_email: str, subject: str, body: str) -> str | None:
        payload = {
            "from": self.from_email,
            "to": [to_email],
            "subject": subject,
            "text": body,
            "html": f"<pre>{html_escape(body)}</pre>",
        }

        try:
            resend.api_key = self.api_key
            res = resend.Emails.send(payload)  # type: ignore[arg-type]
        except Exception as e:  # noqa: BLE001
            raise EmailDeliveryError(f"Resend send failed: {e}") from e

        data = res if isinstance(res, dict) else {}
        if data.get("error"):
            raise EmailDeliveryError(f"Resend rejected the message: {data['error']}")
        msg_id = str(data.get("id") or "").strip() or None

        logger.info("Resend email sent: to=%s msg_id=%s", to_email, msg_id)
        return msg_id


@dataclass
class SesEmailSender:
    region: str
    from_email: str
    client: Any = None
    enabled: bool = True

    def _client(self) -> Any:
        if self.client is None:
            self.client = boto3.client("ses", region_name=self.region)
        return self.client

    def send(self, to_email: str, subject: str, body: str) -> str | None:
        try:
            res = self._client().send_email(
                Source=self.from_email,
                Destination={"ToAddresses": [to_email]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
                },
            )
        except NoCredentialsError as e:
            logger.exception("SES email failed (no AWS credentials)")
            raise EmailDeliveryError("SES email failed: AWS credentials not available") from e
        except EndpointConnectionError as e:
            logger.exception("SES email failed (endpoint connection)")
            raise EmailDeliveryError("SES email failed: could not connect to SES endpoint") from e
        except ClientError as e:
            logger.exception("SES email failed (client error)")
            code = (e.response or {}).get("Error", {}).get("Code", "ClientError")
            raise EmailDeliveryError(f"SES email failed: {code}") from e
        except BotoCoreError as e:
            logger.exception("SES email failed (botocore)")
            raise EmailDeliveryError("SES email failed") from e

        msg_id = res.get("MessageId")
        logger.info("SES email sent: to=%s msg_id=%s", to_email, msg_id)
        return msg_id


SUPPORTED_PROVIDERS = ("resend", "ses")


def _normalize_provider(raw: str | None) -> str:
    """Blank means resend."""
    provider = (raw or "").strip().lower() or "resend"
    if provider in SUPPORTED_PROVIDERS:
        return provider
    raise EmailNotConfiguredError(f"Unsupported EMAIL_PROVIDER={provider!r}. Supported: resend (default), ses.")


def build_email_sender(settings: Settings) -> EmailSender:
    """
    Construct the sender once at startup from settings.

    EMAIL_ENABLED=false or missing credentials -> DisabledEmailSender.
    An unknown EMAIL_PROVIDER is a configuration error and raises.
    """
    if not settings.EMAIL_ENABLED:
        return DisabledEmailSender(reason="EMAIL_ENABLED=false")

    provider = _normalize_provider(settings.EMAIL_PROVIDER)
    from_email = (settings.FROM_EMAIL or "").strip()
    if not from_email:
        logger.warning("EMAIL_ENABLED=true but FROM_EMAIL is unset; email disabled")
        return DisabledEmailSender(reason="FROM_EMAIL is not set")

    if provider == "ses":
        region = (settings.AWS_REGION or "").strip()
        if not region:
            logger.warning("EMAIL_PROVIDER=ses but AWS_REGION is unset; email disabled")
            return DisabledEmailSender(reason="AWS_REGION is not set")
        return SesEmailSender(region=region, from_email=from_email)

    api_key = (settings.RESEND_API_KEY or "").strip()
    if not api_key:
        logger.warning("EMAIL_PROVIDER=resend but RESEND_API_KEY is unset; email disabled")
        return DisabledEmailSender(reason="RESEND_API_KEY is not set")
    return ResendEmailSender(api_key=api_key, from_email=from_email)
