"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from starguide.config import settings
from starguide.api.routes.banners import router as banners_router
from starguide.api.routes.characters import router as characters_router
from starguide.api.routes.pull_advisor import router as pull_advisor_router
from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.services.scoring_logger import get_scoring_logger

logger = logging.getLogger(__name__)


def get_knowledge_dir() -> Optional[Path]:
    """Knowledge directory from settings, or None for the default location."""
    if not settings.knowledge_dir:
        return None
    knowledge_dir = Path(settings.knowledge_dir)
    if knowledge_dir.is_absolute():
        return knowledge_dir
    # Relative path - resolve from repo root
    return Path(__file__).parents[3] / knowledge_dir


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the knowledge base at startup; flush scoring diagnostics at shutdown."""
    if not hasattr(app.state, "knowledge_base"):
        app.state.knowledge_base = KnowledgeBase(get_knowledge_dir())
        logger.info(f"Knowledge base version {app.state.knowledge_base.version} ready")

    scoring_logger = get_scoring_logger(settings.scoring_diagnostics, settings.scoring_max_entries)
    scoring_logger.start_session(
        str(uuid.uuid4()),
        settings.default_game_mode,
        {"knowledge_version": app.state.knowledge_base.version},
    )
    yield
    scoring_logger.save(suffix="_shutdown")


app = FastAPI(
    title="StarGuide",
    description="Honkai: Star Rail pull and banner recommendations",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "starguide"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "StarGuide API",
        "version": "0.1.0",
        "docs": "/docs",
    }


# Register routers
app.include_router(pull_advisor_router)
app.include_router(banners_router)
app.include_router(characters_router)
