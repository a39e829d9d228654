# edge_engage/main.py
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edge_engage.auth.session import SessionIdentityProvider
from edge_engage.core.config import settings, require_jwt_secret
from edge_engage.core.errors import OAuthError
from edge_engage.middleware.session_gate import register_session_gate
from edge_engage.routes.auth import router as auth_router
from edge_engage.routes.consent import router as consent_router
from edge_engage.routes.oauth import router as oauth_router
from edge_engage.routes.projects import router as projects_router
from edge_engage.services.email import build_email_sender

logger = logging.getLogger(__name__)

require_jwt_secret()

app = FastAPI(title="Edge Engage")

# Collaborators are built once here and read from app.state by dependencies.
app.state.email_sender = build_email_sender(settings)
app.state.identity_provider = SessionIdentityProvider()

logger.info(
    "Edge Engage starting: env=%s email_sender=%s login=%s landing=%s",
    settings.ENV,
    type(app.state.email_sender).__name__,
    settings.LOGIN_PATH,
    settings.DEFAULT_LANDING_PATH,
)

# Application (non-OAuth) errors: {"error": <CODE>, "message": <text>}
APP_ERROR_CODES: dict[int, str] = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


def app_error_body(status_code: int, message: str, **extra) -> dict:
    body = {"error": APP_ERROR_CODES.get(status_code, "HTTP_ERROR"), "message": message}
    body.update(extra)
    return body


def detail_message(detail) -> str:
    if isinstance(detail, dict):
        detail = detail.get("message")
    if isinstance(detail, str) and detail:
        return detail
    return "Request failed"


@app.exception_handler(OAuthError)
def oauth_exception_handler(request: Request, exc: OAuthError):  # noqa: ARG001
    # OAuth endpoints keep the RFC 6749 body and are never cached.
    headers = {"Cache-Control": "no-store", **(exc.headers() or {})}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException):  # noqa: ARG001
    return JSONResponse(
        status_code=exc.status_code,
        content=app_error_body(exc.status_code, detail_message(exc.detail)),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    # ctx can carry exception objects, which are not JSON serializable
    errors = [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]
    return JSONResponse(
        status_code=422,
        content=app_error_body(422, "Invalid request payload", details={"errors": errors}),
    )


register_session_gate(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (auth_router, consent_router, oauth_router, projects_router):
    app.include_router(router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
