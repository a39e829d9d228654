# edge_engage/routes/auth.py
from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from edge_engage.core.config import settings
from edge_engage.core.database import get_db
from edge_engage.core.security import create_session_token, verify_token_purpose
from edge_engage.dependencies.email import get_email_sender
from edge_engage.schemas.auth import LoginPageOut, MagicLinkIn, MessageOut
from edge_engage.services.email import EmailDeliveryError, EmailNotConfiguredError, EmailSender
from edge_engage.services.magic_links import consume_magic_link, issue_magic_link
from edge_engage.services.sessions import clear_session_cookie, set_session_cookie
from edge_engage.services.users import ensure_user, get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def safe_local_path(value: str | None) -> str:
    """Only same-origin absolute paths are honored as post-sign-in destinations."""
    candidate = (value or "").strip()
    if not candidate.startswith("/") or candidate.startswith("//") or "\\" in candidate:
        return settings.DEFAULT_LANDING_PATH
    return candidate


# -----------------------------
# Magic link sender
# -----------------------------
def send_magic_link(sender: EmailSender, email: str, token: str) -> None:
    link = f"{settings.PUBLIC_BASE_URL}/auth/callback?token={quote(token, safe='')}"
    subject = "Your Edge Engage sign-in link"
    body = "\n".join(
        [
            "Click the link below to sign in to your Edge Engage workspace:",
            link,
            "",
            f"The link expires in {settings.MAGIC_LINK_EXPIRE_MINUTES} minutes.",
            "If you did not request this, you can ignore this email.",
        ]
    )

    try:
        msg_id = sender.send(to_email=email, subject=subject, body=body)
    except EmailNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=f"Email delivery not configured: {e}")
    except EmailDeliveryError as e:
        raise HTTPException(status_code=500, detail=str(e))
    # Never log the link or token.
    logger.info("Magic link queued: to=%s enabled=%s msg_id=%s", email, sender.enabled, msg_id)


# -----------------------------
# Routes
# -----------------------------
@router.get("/login", response_model=LoginPageOut)
def login_page(redirect: str | None = None):
    return {"message": "Sign in with a magic link", "redirect": safe_local_path(redirect)}


@router.post("/login", response_model=MessageOut)
def request_magic_link(
    payload: MagicLinkIn,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    email = payload.email.strip().lower()
    user = ensure_user(db, email)
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive")

    token = issue_magic_link(db, user, redirect=safe_local_path(payload.redirect))
    send_magic_link(sender, email, token)
    return {"message": "Check your email for the magic link to sign in."}


@router.get("/auth/callback")
def magic_link_callback(token: str, db: Session = Depends(get_db)):
    try:
        payload = verify_token_purpose(token, expected_purpose="magic_link")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    email = str(payload.get("sub") or "").strip().lower()
    if not email:
        raise HTTPException(status_code=400, detail="Invalid token payload")

    user = get_user_by_email(db, email)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired token")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive")

    try:
        consume_magic_link(db, user, payload.get("jti"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    resp = RedirectResponse(url=safe_local_path(payload.get("redirect")), status_code=303)
    set_session_cookie(resp, create_session_token(user.id))
    logger.info("Session started: user_id=%s", user.id)
    return resp


@router.post("/logout", response_model=MessageOut)
def logout(response: Response):
    clear_session_cookie(response)
    return {"message": "Logged out"}
