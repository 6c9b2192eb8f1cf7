"""FastAPI main application."""

import contextlib
import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from bearos import __version__
from bearos.api.routes import rejection_handler, router
from bearos.api.websocket import websocket_manager
from bearos.config import settings
from bearos.engine import Rejection
from bearos.repositories.game_repository import GameRepository
from bearos.services.publisher_service import PublisherService
from bearos.services.table_service import table_service

# Configure logging for the app (must be after imports but before app usage)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)
logging.getLogger("bearos").setLevel(logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown events.

    Handles:
    - Redis connection setup
    - MongoDB connection and table restoration
    - Wiring the table service to the WebSocket manager
    - Cleanup on shutdown
    """
    app.state.publisher_service = PublisherService()
    await app.state.publisher_service.connect()

    # Optional: tables live in memory only if MongoDB is unreachable
    app.state.game_repository = GameRepository()
    try:
        await app.state.game_repository.connect()
    except (ConnectionError, TimeoutError, OSError, PyMongoError):
        logger.warning("MongoDB not available, running without persistence")
        app.state.game_repository = None

    table_service.set_services(
        repository=app.state.game_repository,
        publisher=app.state.publisher_service if app.state.publisher_service.is_connected else None,
    )
    table_service.add_listener(websocket_manager.broadcast_state)

    restored = await table_service.restore_active()
    if restored > 0:
        logger.info("Restored %d tables from MongoDB on startup", restored)

    if app.state.publisher_service.is_connected:
        await app.state.publisher_service.subscribe("table_events:*", table_service.handle_remote_event)
        await app.state.publisher_service.start_subscriber()

    yield

    await table_service.shutdown()

    if app.state.game_repository:
        with contextlib.suppress(PyMongoError):
            await app.state.game_repository.disconnect()

    await app.state.publisher_service.close()


# Create FastAPI app
app = FastAPI(
    title="Bearos Poker API",
    description="Rules engine and table server for Bearos Poker",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(Rejection, rejection_handler)
app.include_router(router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "bearos.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info",
    )


if __name__ == "__main__":
    main()
