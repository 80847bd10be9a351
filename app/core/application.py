"""
Application builder.

Each step wires one concern (middlewares, routes, the Square client
lifespan, error mapping) and may run only once; `build()` refuses an
application with a required step missing.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import ConfigError, settings
from app.core.logging import api_logger, app_logger, init_app_logging
from app.infra.square_client import GATEWAY_TIMEOUT, SquareClient, UpstreamFetchError
from app.routers import analytics, health, performance, team

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:8080"]
REQUIRED_STEPS = ("middlewares", "routes", "lifespan", "error_handlers")


def _error_response(status_code: int, error: str, **detail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": {"error": error, **detail}})


class ApplicationBuilder:
    """Step-by-step assembly of the FastAPI application."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.app = FastAPI(
            title=settings.APP_NAME,
            version="1.0.0",
            description="Team performance and restaurant analytics over Square POS data",
            docs_url="/docs",
            redoc_url="/redoc",
        )
        self._transport = transport
        self._done: set[str] = set()

    def _step(self, name: str) -> None:
        if name in self._done:
            raise RuntimeError(f"Step '{name}' already applied")
        self._done.add(name)

    def add_middlewares(self) -> ApplicationBuilder:
        """CORS for the dashboard plus one log line per request."""
        self._step("middlewares")

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS_LIST or DEFAULT_CORS_ORIGINS,
            allow_credentials=False,
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["*"],
        )

        @self.app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            api_logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                query=request.url.query or None,
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return response

        app_logger.info("Middlewares added", cors_origins=len(settings.CORS_ORIGINS_LIST))
        return self

    def add_routes(self) -> ApplicationBuilder:
        self._step("routes")

        for module in (health, team, performance, analytics):
            self.app.include_router(module.router)

        @self.app.get("/")
        def root():
            return {
                "name": settings.APP_NAME,
                "env": settings.ENV,
                "square_environment": settings.SQUARE_ENVIRONMENT,
                "docs": "/docs",
            }

        app_logger.info("Routes added", routes=len(self.app.routes))
        return self

    def add_lifespan(self) -> ApplicationBuilder:
        """
        Own the Square client for the lifetime of the application.

        Missing credentials do not stop startup: health endpoints keep
        answering and report endpoints fail with a config error.
        """
        self._step("lifespan")
        transport = self._transport

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            try:
                app.state.square_client = SquareClient.from_settings(settings, transport=transport)
                app_logger.info("Square client ready", environment=settings.SQUARE_ENVIRONMENT)
            except ConfigError as exc:
                app.state.square_client = None
                app_logger.error("Square client not configured", missing=",".join(exc.missing))

            yield

            if app.state.square_client is not None:
                await app.state.square_client.aclose()
            app_logger.info("Square client closed")

        self.app.router.lifespan_context = lifespan
        return self

    def add_error_handlers(self) -> ApplicationBuilder:
        """Config errors answer 500; upstream failures answer 502, or 504 on timeout."""
        self._step("error_handlers")

        @self.app.exception_handler(ConfigError)
        async def config_error_handler(request: Request, exc: ConfigError):
            app_logger.error("Configuration error", path=request.url.path, missing=",".join(exc.missing))
            return _error_response(500, "config_error", message=exc.message, missing=exc.missing)

        @self.app.exception_handler(UpstreamFetchError)
        async def upstream_error_handler(request: Request, exc: UpstreamFetchError):
            api_logger.error(
                "Upstream fetch failed", path=request.url.path, upstream_status=exc.status_code
            )
            return _error_response(
                504 if exc.status_code == GATEWAY_TIMEOUT else 502,
                "upstream_error",
                status=exc.status_code,
                message=exc.message,
                details=exc.details,
            )

        return self

    def build(self) -> FastAPI:
        missing = [step for step in REQUIRED_STEPS if step not in self._done]
        if missing:
            raise RuntimeError(f"Application steps not applied: {', '.join(missing)}")
        app_logger.info("FastAPI application built")
        return self.app


def create_application(transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """
    Create the FastAPI application.

    `transport` replaces the network transport of the Square client (tests).
    """
    init_app_logging()

    return (
        ApplicationBuilder(transport)
        .add_middlewares()
        .add_routes()
        .add_lifespan()
        .add_error_handlers()
        .build()
    )
