"""
FastAPI main application
Quiz board session controller

Modular architecture with separated API routers in jeopardy/api/:
- health.py: Health check and system status
- game.py: Session operations (start, select, reveal, judge, final round, cues)
- admin.py: Operator shortcuts (fast-forward, markers, reset, board loading)

All routers access the shared session via the jeopardy.state module.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from jeopardy import state
from jeopardy.board_loader import fetch_board
from jeopardy.config import load_config
from jeopardy.errors import LoadError

# Import all API routers
from jeopardy.api import health, game, admin


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    settings = load_config()
    logging.getLogger().setLevel(settings.log_level.upper())
    session = state.build_session(settings)

    # Startup: a failed load leaves the board empty until /admin/load-board succeeds
    try:
        await fetch_board(session, settings.board_path)
        state.LOAD_ERROR = None
        logger.info(f"✅ Server started with board from {settings.board_path}")
    except LoadError as e:
        state.LOAD_ERROR = str(e)
        logger.error(f"❌ Failed to load board: {e}")

    yield

    # Shutdown
    session.teardown()
    logger.info("🛑 Server shutting down")


# Create FastAPI app
app = FastAPI(
    title="Quiz Board Session Controller",
    description="Turn-based quiz board game: clues, daily doubles, final round and standings",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== INCLUDE ROUTERS ====================

# Health check (GET /)
app.include_router(health.router)

# Game operations (GET /game/state, POST /game/select, ...)
app.include_router(game.router)

# Admin endpoints (POST /admin/fast-forward, /admin/reset, ...)
app.include_router(admin.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
