# edge_engage/routes/oauth.py
"""
Machine-facing OAuth endpoints. Every response is JSON; failures use the
OAuth error body rendered by the OAuthError handler in main.py.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from edge_engage.core.database import get_db
from edge_engage.core.errors import invalid_request
from edge_engage.dependencies.params import read_request_params
from edge_engage.schemas.oauth import OAuthErrorOut, RevokeRequestIn, TokenOut, TokenRequestIn, UserInfoOut
from edge_engage.services.token_exchange import exchange_authorization_code
from edge_engage.services.token_revocation import revoke_token
from edge_engage.services.userinfo import get_userinfo

router = APIRouter(prefix="/api/oauth", tags=["oauth"])

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}

_ERROR_RESPONSES = {
    400: {"model": OAuthErrorOut},
    401: {"model": OAuthErrorOut},
    500: {"model": OAuthErrorOut},
}


async def token_request(params: dict[str, str] = Depends(read_request_params)) -> TokenRequestIn:
    try:
        return TokenRequestIn.model_validate(params)
    except ValidationError:
        raise invalid_request("Invalid request parameters")


async def revoke_request(params: dict[str, str] = Depends(read_request_params)) -> RevokeRequestIn:
    try:
        return RevokeRequestIn.model_validate(params)
    except ValidationError:
        raise invalid_request("Invalid request parameters")


@router.post("/token", response_model=TokenOut, responses=_ERROR_RESPONSES)
def token(payload: TokenRequestIn = Depends(token_request), db: Session = Depends(get_db)):
    # client_secret is accepted for client compatibility; clients are not registered.
    grant = exchange_authorization_code(
        db,
        grant_type=payload.grant_type,
        code=payload.code,
        client_id=payload.client_id,
        redirect_uri=payload.redirect_uri,
    )
    return JSONResponse(content=grant.to_response(), headers=NO_STORE_HEADERS)


@router.get("/userinfo", response_model=UserInfoOut, responses=_ERROR_RESPONSES)
def userinfo(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
):
    return JSONResponse(content=get_userinfo(db, authorization))


@router.post("/revoke", responses=_ERROR_RESPONSES)
def revoke(payload: RevokeRequestIn = Depends(revoke_request), db: Session = Depends(get_db)):
    # Unknown tokens still get 200 (RFC 7009 section 2.2).
    revoke_token(db, token=payload.token, client_id=payload.client_id)
    return JSONResponse(content={}, headers=NO_STORE_HEADERS)
