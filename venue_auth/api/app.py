"""Application factory wiring the auth router and error mapping."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from venue_auth.config import AuthSettings, configure_logging
from venue_auth.errors import AuthError, BadRequestError, ThrottledError
from venue_auth.sdk.client import AuthClient
from venue_auth.api.routes import router

logger = logging.getLogger(__name__)


async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, type(exc).__name__)
    headers = {"Retry-After": str(exc.retry_after)} if isinstance(exc, ThrottledError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query validation failures as BadRequest."""
    problems = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        field = ".".join(location) or "body"
        problems.append(f"{field}: {error.get('msg', 'invalid')}")
    return await handle_auth_error(request, BadRequestError("; ".join(problems) or None))


def create_app(settings: Optional[AuthSettings] = None, client: Optional[AuthClient] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Settings (read from the environment if omitted)
        client: Pre-built AuthClient (built from settings if omitted)
    """
    if client is None:
        settings = settings or AuthSettings.from_env()
        client = AuthClient.from_settings(settings)
    if settings is not None:
        configure_logging(settings.log_level)

    app = FastAPI(title="Venue Auth")
    app.state.auth_client = client
    app.add_exception_handler(AuthError, handle_auth_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.include_router(router)
    return app
