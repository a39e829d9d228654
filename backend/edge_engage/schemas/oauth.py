from typing import Optional

from pydantic import BaseModel, ConfigDict


class TokenRequestIn(BaseModel):
    # Everything optional: missing fields map to OAuth errors, not 422s.
    grant_type: Optional[str] = None
    code: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_uri: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class RevokeRequestIn(BaseModel):
    token: Optional[str] = None
    token_type_hint: Optional[str] = None
    client_id: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_token: str
    scope: str


class UserInfoOut(BaseModel):
    sub: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
    phone_number: Optional[str] = None


class OAuthErrorOut(BaseModel):
    error: str
    error_description: str


class ConsentOut(BaseModel):
    client_id: str
    redirect_uri: str
    scope: str
    scope_descriptions: list[str]
    state: Optional[str] = None
    response_type: str
    signed_in_as: str
