from __future__ import annotations

from fastapi import Request

from edge_engage.core.config import settings
from edge_engage.services.email import EmailSender, build_email_sender


def get_email_sender(request: Request) -> EmailSender:
    """Sender constructed at startup and held on app.state."""
    sender = getattr(request.app.state, "email_sender", None)
    if sender is None:
        sender = build_email_sender(settings)
        request.app.state.email_sender = sender
    return sender
