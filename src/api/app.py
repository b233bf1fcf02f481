"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, error handlers,
the chat router, and the health endpoint. The module-level ``app``
instance allows ``uvicorn src.api.app:app --reload``.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.error_handler import register_error_handlers
from src.api.routes import chat
from src.core.config import get_settings
from src.core.models import HealthResponse

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Returns:
        FastAPI: The configured application, ready for ``uvicorn``.
    """

    app = FastAPI(
        title="EchoVoice Relay",
        description="Relays recorded voice messages to Gemini and returns its reply.",
        version="0.1.0",
    )

    # -- CORS --
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(chat.router)

    if not settings.api_key:
        logger.warning("API_KEY is not set; /api/chat will answer 500 until it is configured")

    return app


app = create_app()
