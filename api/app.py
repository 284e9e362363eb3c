"""FastAPI application: chat endpoint streaming answers as Server-Sent Events."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.rate_limit import RateLimiter
from api.schemas import ChatRequest
from api.streaming import MEDIA_TYPE, SSESession
from core.clients import ClientRegistry
from core.config import Settings, settings
from core.errors import ConfigError, NotInitializedError, ValidationError
from core.logging_setup import ACCESS_LOGGER

logger = logging.getLogger(__name__)
access_logger = logging.getLogger(ACCESS_LOGGER)

WELCOME = "Welcome to Jigsaw Documentation API"


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        message = err.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def create_app(
    registry: ClientRegistry | None = None, config: Settings | None = None
) -> FastAPI:
    """Build the application.

    Args:
        registry: Client registry (will create and initialize at startup if None
            or not yet initialized)
        config: Settings (default: module settings)
    """
    config = config or settings
    registry = registry or ClientRegistry(config)
    limiter = RateLimiter(config.rate_limit_requests, config.rate_limit_window_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not registry.initialized:
            registry.initialize()
        yield
        registry.close()

    app = FastAPI(title="Documentation Chat API", lifespan=lifespan)
    app.state.registry = registry
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        client = request.client.host if request.client else "-"
        body = response.body_iterator

        async def log_when_sent():
            try:
                async for chunk in body:
                    yield chunk
            finally:
                access_logger.info(
                    "%s -- %s - %s - %d - %.1fms",
                    client,
                    request.method,
                    request.url.path,
                    response.status_code,
                    (time.perf_counter() - start) * 1000,
                )

        # logged once the last body chunk has been sent
        response.body_iterator = log_when_sent()
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(ValidationError)
    async def invalid_request(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )

    @app.exception_handler(NotInitializedError)
    async def not_initialized(request: Request, exc: NotInitializedError):
        logger.error("Request before initialization: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Service is not ready"},
        )

    @app.exception_handler(ConfigError)
    async def config_error(request: Request, exc: ConfigError):
        logger.error("Configuration error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    router = APIRouter(prefix="/api")

    @router.post("/chat", dependencies=[Depends(limiter)])
    def chat(body: ChatRequest):
        """Answer the latest message of a conversation as an event stream."""
        query = body.latest_message()
        if not query:
            raise ValidationError("Message is required")

        agent = registry.agent
        session = SSESession(request_id=body.id)
        headers = session.open()
        logger.info("Chat %s: %s", body.id, query)
        return StreamingResponse(
            session.run(agent.stream(query)), media_type=MEDIA_TYPE, headers=headers
        )

    app.include_router(router)

    @app.get("/")
    def root():
        return {"message": WELCOME}

    @app.get("/health")
    def health():
        return {"status": "ok", "initialized": registry.initialized}

    return app
