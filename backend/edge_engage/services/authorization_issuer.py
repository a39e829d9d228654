# edge_engage/services/authorization_issuer.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edge_engage.auth.consent import ConsentDecision, ConsentRequest, RedirectTarget, decide
from edge_engage.core.config import settings
from edge_engage.core.errors import server_error
from edge_engage.core.security import generate_opaque_token, utc_now
from edge_engage.models.user import User
from edge_engage.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def authorization_code_expiry(now: datetime) -> datetime:
    return now + timedelta(seconds=settings.OAUTH_CODE_TTL_SECONDS)


def issue_authorization_code(
    db: Session,
    user: User,
    consent: ConsentRequest,
    *,
    now: datetime | None = None,
) -> str:
    """
    Persist a new single-use code for the approved consent and return the raw code.
    The code is never returned if the insert fails.
    """
    consent.require_client()
    now = now or utc_now()
    raw_code = generate_opaque_token()

    store = CredentialStore(db)
    try:
        store.create_authorization(
            raw_code=raw_code,
            user_id=user.id,
            client_id=str(consent.client_id),
            redirect_uri=str(consent.redirect_uri),
            scope=consent.scope,
            expires_at=authorization_code_expiry(now),
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store authorization code: user_id=%s client_id=%s", user.id, consent.client_id)
        raise server_error("Failed to grant authorization")

    logger.info(
        "Issued authorization code: user_id=%s client_id=%s scope=%r",
        user.id,
        consent.client_id,
        consent.scope,
    )
    return raw_code


def respond_to_consent(
    db: Session,
    user: User,
    consent: ConsentRequest,
    decision: ConsentDecision,
    *,
    now: datetime | None = None,
) -> RedirectTarget:
    consent.require_client()

    if decision is ConsentDecision.DENY:
        logger.info("Consent denied: user_id=%s client_id=%s", user.id, consent.client_id)
        return decide(consent, ConsentDecision.DENY)

    code = issue_authorization_code(db, user, consent, now=now)
    return decide(consent, ConsentDecision.APPROVE, code=code)
