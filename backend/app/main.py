"""FastAPI application entry point for the Weekly Wound Report backend."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import db
from app.agents.chat_assistant import ChatAssistant
from app.api.routes import router, set_assistant
from app.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def load_assistant() -> ChatAssistant:
    """Build the AI analyst; it stays unavailable without a key unless mocked."""
    assistant = ChatAssistant(
        settings.GEMINI_MODEL,
        settings.GEMINI_API_KEY,
        mock=settings.MOCK_ASSISTANT,
    )
    assistant.load()
    return assistant


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    logger.info("Starting Weekly Wound Report API.")
    db.init_db()
    set_assistant(load_assistant())

    yield

    # Shutdown
    set_assistant(None)
    logger.info("Shutting down Weekly Wound Report API.")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Weekly Wound Report API",
    version="3.5.0",
    description="Pressure-wound record keeping: de-duplicated history, stage audits, exports.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health")
def health_check() -> dict[str, str]:
    return {
        "status": "ok",
        "mock_assistant": str(settings.MOCK_ASSISTANT),
        "role": settings.USER_ROLE,
    }


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
