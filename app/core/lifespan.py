"""Application lifespan: startup and shutdown.

Only wiring of infrastructure (logging, event bus, DB engine dispose);
no business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.infrastructure.messaging import get_event_bus
from app.infrastructure.persistence.database import dispose_engine
from app.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, event bus on app.state (other modules subscribe to
    RequestApproved/RequestRejected there). Shutdown: drop event handlers,
    dispose the SQL engine.
    """
    setup_logging()
    app.state.event_bus = get_event_bus()
    logger.info("Approvals service started")

    yield

    app.state.event_bus.clear_listeners()
    await dispose_engine()
    logger.info("Approvals service stopped")
