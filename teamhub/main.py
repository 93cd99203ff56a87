from __future__ import annotations

from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

try:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    sentry_sdk = None


from teamhub.api import auth_router, milestones_router, tasks_router, teams_router, users_router
from teamhub.core.errors import CollaboratorError, TeamHubError
from teamhub.core.logging import configure_logging
from teamhub.core.settings import settings
from teamhub.services.events import EventHub

configure_logging()

if settings.sentry_dsn and sentry_sdk:
    sentry_sdk.init(  # type: ignore[call-arg]
        dsn=str(settings.sentry_dsn),
        environment=settings.environment,
        integrations=[FastApiIntegration()],
        traces_sample_rate=0.1,
    )

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.state.hub = EventHub()


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers.setdefault("X-Request-ID", request_id)
        return response


app.add_middleware(RequestContextMiddleware)
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(auth_router.router)
app.include_router(milestones_router.router)
app.include_router(tasks_router.router)
app.include_router(teams_router.router)
app.include_router(users_router.router)


@app.get("/healthz", tags=["system"])
async def health() -> dict:
    return {"status": "ok"}


@app.exception_handler(TeamHubError)
async def teamhub_exception_handler(request: Request, exc: TeamHubError):
    body = {"detail": exc.message, "code": exc.code}
    if exc.field is not None:
        body["field"] = exc.field
    logger = structlog.get_logger()
    log = logger.error if isinstance(exc, CollaboratorError) else logger.info
    log(
        "request_rejected",
        status=exc.status_code,
        code=exc.code,
        field=exc.field,
        error_type=type(exc).__name__,
        path=str(request.url.path),
    )
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    detail = exc.detail
    code = None
    if isinstance(detail, dict):
        code = detail.get("code")
        message = detail.get("message") or code
    else:
        message = str(detail)
    body = {"detail": message}
    if code:
        body["code"] = code
    logger = structlog.get_logger()
    logger.error(
        "http_exception",
        status=exc.status_code,
        code=code,
        detail=message,
        path=str(request.url),
    )
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)
