"""Middleware registration."""

from fastapi import FastAPI

from ihub.config import Settings
from ihub.middleware.cors import setup_cors
from ihub.middleware.error_handler import setup_error_handlers
from ihub.middleware.logging import setup_logging
from ihub.middleware.rate_limit import RateLimitMiddleware
from ihub.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, error handlers and the middleware stack.

    Starlette runs middleware last-added-first, so the resulting order is
    CORS -> request id -> rate limit -> routes. The request id is bound
    before rate limiting so rejected requests are still traceable.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
