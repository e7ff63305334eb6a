"""FastAPI application for the ISMP transaction indexer callback service."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from ismp_indexer.clients.hyperbridge_client import HyperbridgeServiceClient
from ismp_indexer.clients.relayer_client import RelayerServiceClient
from ismp_indexer.pipeline.classifier import ChainContext

from .config import get_settings
from .routes.health import router as health_router
from .routes.transactions import router as transactions_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Resolve the attached chain and open service clients at startup."""
    settings = get_settings()

    # ConfigurationError here aborts startup rather than running degraded
    chain = ChainContext.from_values(settings.INDEXER_CHAIN_KIND, settings.EVM_CHAIN_ID)
    logger.info("lifespan.startup", chain_kind=chain.kind.value, chain_id=chain.chain_id)

    client_options = {
        "api_key": settings.SERVICE_API_KEY or None,
        "timeout_seconds": settings.HTTP_TIMEOUT_SECONDS,
        "max_retries": settings.MAX_RETRIES,
    }
    relayer = RelayerServiceClient(settings.RELAYER_SERVICE_URL, **client_options)
    hyperbridge = HyperbridgeServiceClient(settings.HYPERBRIDGE_SERVICE_URL, **client_options)

    # Store on app.state for request handlers
    app.state.chain = chain
    app.state.relayer = relayer
    app.state.hyperbridge = hyperbridge

    logger.info("lifespan.ready")
    yield

    # Shutdown
    logger.info("lifespan.shutdown")
    await relayer.close()
    await hyperbridge.close()


app = FastAPI(
    title="ismp-indexer",
    description="ISMP handler transaction consumer: resolves origin state machines and dispatches to bookkeeping services",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(transactions_router)
