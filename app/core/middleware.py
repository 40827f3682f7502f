"""Security and session gate middleware for the Dashboard Console."""

import logging
import re
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.access_policy import ANONYMOUS, Principal, evaluate_access
from app.core.config import settings
from app.core.database import SessionLocal

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Control referrer information
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Pages load their script and styles from /static only
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data: https:; "
            "frame-ancestors 'none'; "
            "base-uri 'self'; "
            "form-action 'self'"
        )

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # Panel data must never be served from a cache
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"

        return response


class RequestValidationMiddleware(BaseHTTPMiddleware):
    """Validate incoming requests for security."""

    # Maximum request body size (1MB)
    MAX_BODY_SIZE = 1024 * 1024

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.MAX_BODY_SIZE:
            return Response(
                content='{"detail": "Request body too large"}',
                status_code=413,
                media_type="application/json",
            )

        # The API only speaks JSON
        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type", "")
            if content_type and "application/json" not in content_type:
                return Response(
                    content='{"detail": "Unsupported content type"}',
                    status_code=415,
                    media_type="application/json",
                )

        return await call_next(request)


def lookup_principal(session_factory, access_token: str | None) -> Principal:
    """Resolve the session cookie and the profile role into a Principal."""
    from app.services.auth_context import fetch_profile
    from app.services.client import ServiceClient

    if not access_token:
        return ANONYMOUS

    db = session_factory()
    try:
        client = ServiceClient(db)
        session = client.auth.get_session(access_token).data
        if session is None:
            return ANONYMOUS
        profile = fetch_profile(client.data, session.user_id)
        return Principal(authenticated=True, role=profile.get("role") if profile else None)
    finally:
        db.close()


class SessionGateMiddleware(BaseHTTPMiddleware):
    """
    Redirect page navigations according to the access policy.

    Runs before any page is rendered. Static assets, the API and the
    health/doc endpoints are excluded by GATE_EXCLUDED_PATTERN; the API
    enforces access through its own dependencies.
    """

    def __init__(self, app, excluded_pattern: str | None = None):
        super().__init__(app)
        self.excluded = re.compile(excluded_pattern or settings.GATE_EXCLUDED_PATTERN)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if self.excluded.search(path):
            return await call_next(request)

        session_factory = getattr(request.app.state, "session_factory", SessionLocal)
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        principal = await run_in_threadpool(lookup_principal, session_factory, token)

        decision = evaluate_access(path, principal)
        if not decision.allowed:
            logger.debug(f"Session gate: {path} -> {decision.location}")
            return RedirectResponse(url=decision.location, status_code=307)

        request.state.principal = principal
        return await call_next(request)
