# edge_engage/routes/consent.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from edge_engage.auth.consent import ConsentDecision, ConsentRequest, describe_scopes
from edge_engage.core.database import get_db
from edge_engage.core.errors import invalid_request
from edge_engage.dependencies.auth import get_optional_user
from edge_engage.dependencies.params import read_request_params
from edge_engage.middleware.session_gate import login_redirect_url
from edge_engage.models.user import User
from edge_engage.schemas.oauth import ConsentOut
from edge_engage.services.authorization_issuer import respond_to_consent

router = APIRouter(prefix="/oauth", tags=["oauth"])


def _parse_decision(raw: str | None) -> ConsentDecision:
    try:
        return ConsentDecision((raw or "").strip().lower())
    except ValueError:
        raise invalid_request("decision must be 'approve' or 'deny'")


@router.get("/consent", response_model=ConsentOut)
def consent_screen(request: Request, user: User | None = Depends(get_optional_user)):
    """
    Data for the consent screen. Signed-out users are sent to sign-in and come
    back to this exact URL (query string included).
    """
    if user is None:
        return_to = request.url.path
        if request.url.query:
            return_to = f"{return_to}?{request.url.query}"
        return RedirectResponse(url=login_redirect_url(return_to), status_code=307)

    consent = ConsentRequest.from_params(request.query_params)
    consent.require_client()

    return ConsentOut(
        client_id=str(consent.client_id),
        redirect_uri=str(consent.redirect_uri),
        scope=consent.scope,
        scope_descriptions=describe_scopes(consent.scope),
        state=consent.state,
        response_type=consent.response_type,
        signed_in_as=user.email,
    )


@router.post("/consent")
def consent_decision(
    request: Request,
    params: dict[str, str] = Depends(read_request_params),
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if user is None:
        raise HTTPException(status_code=401, detail="Sign in required")

    # The consent page posts its own query string back; body values win.
    merged = dict(request.query_params)
    merged.update(params)

    consent = ConsentRequest.from_params(merged)
    decision = _parse_decision(merged.get("decision"))
    target = respond_to_consent(db, user, consent, decision)
    return RedirectResponse(url=target.url, status_code=303)
