from contextlib import asynccontextmanager
from fastapi import FastAPI
from routers.signaling import signaling_router
from relay import SignalingRelay
from constants import LOG_LEVEL, LOG_FILE
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Room state lives only in this process, for the lifetime of the app
    app.state.signaling_relay = SignalingRelay()
    logger.info("Signaling relay started")
    yield
    registry = app.state.signaling_relay.registry
    logger.info(
        f"Signaling relay stopping with {len(registry.connections)} connections in {len(registry)} rooms"
    )


app = FastAPI(lifespan=lifespan)

app.include_router(signaling_router)

logger.info("FastAPI application initialized")
