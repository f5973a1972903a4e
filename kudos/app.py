"""FastAPI application factory and configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel
from starlette.middleware.sessions import SessionMiddleware

from . import models  # noqa: F401 - ensure models are registered with SQLModel
from .api import register_error_handlers, register_routes
from .core import (
    ALLOWED_CORS_ORIGINS,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DB_RESET,
    LOGGER,
    SECRET_KEY,
    engine,
)
from .services.rate_limit import RateLimiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    if DB_RESET:
        SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    app.state.rate_limiter.start()
    LOGGER.info("Kudos API started")
    try:
        yield
    finally:
        await app.state.rate_limiter.shutdown()
        LOGGER.info("Kudos API stopped")


def create_app(rate_limiter: Optional[RateLimiter] = None) -> FastAPI:
    app = FastAPI(title="Kudos API", version="0.1.0", lifespan=lifespan)
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Retry-After"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=SECRET_KEY,
        session_cookie="sid",
        https_only=COOKIE_SECURE,
        same_site=COOKIE_SAMESITE,
        domain=COOKIE_DOMAIN,
    )

    register_error_handlers(app)
    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("kudos.app:app", host="127.0.0.1", port=3000, reload=True)
