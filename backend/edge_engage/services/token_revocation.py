from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edge_engage.core.errors import invalid_request, server_error
from edge_engage.core.security import utc_now
from edge_engage.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def revoke_token(
    db: Session,
    *,
    token: str | None,
    client_id: str | None = None,
    now: datetime | None = None,
) -> bool:
    """
    Revoke the pair that owns ``token`` (access or refresh).

    Unknown tokens, and tokens belonging to another client, are ignored so the
    caller can always answer 200. Returns True when a row was revoked.
    """
    if not token:
        raise invalid_request("Missing required parameter: token")

    store = CredentialStore(db)
    try:
        record = store.find_by_any_token(token)
        if record is None:
            return False
        if client_id and record.client_id != client_id:
            logger.warning("Revocation for token id=%s rejected: client mismatch", record.id)
            return False
        store.revoke_token(record, now or utc_now())
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Token revocation failed")
        raise server_error("Failed to revoke token")

    logger.info("Revoked token id=%s client_id=%s", record.id, record.client_id)
    return True
