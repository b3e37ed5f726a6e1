from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from campaign_payments.config.settings import settings
from campaign_payments.config.database import engine, create_tables
from campaign_payments.routes import webhooks
from campaign_payments.services.chain import ChainClient
from campaign_payments.utils.exceptions import (
    INTERNAL_ERROR_MESSAGE,
    CampaignPaymentException,
    PaymentDecodeException,
    UnregisteredSenderException,
)
from campaign_payments.utils.logger import logger as app_logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management.
    - Startup: Create database tables, connect chain client
    - Shutdown: Close database connection
    """
    # Startup
    logger.info("Creating database tables...")
    await create_tables()

    if settings.RPC_URL:
        app.state.chain_client = ChainClient.from_rpc_url(settings.RPC_URL)
    else:
        app.state.chain_client = None

    yield

    # Shutdown
    logger.info("Closing database connection...")
    await engine.dispose()


app = FastAPI(
    title="Campaign Payments",
    description="Tenderly webhook ingestion for on-chain campaign payments",
    version="1.0.0",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = webhooks.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# Exception handlers
@app.exception_handler(PaymentDecodeException)
async def decode_exception_handler(request, exc: PaymentDecodeException):
    """Decode failures are logged in full for replay; the response stays generic."""
    app_logger.error(f"Failed to decode campaign payment: {exc.reason}", extra=exc.log_context())
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )


@app.exception_handler(UnregisteredSenderException)
async def unregistered_sender_handler(request, exc: UnregisteredSenderException):
    app_logger.error("Campaign payment from unregistered sender", extra={"sender": exc.sender_address})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )


@app.exception_handler(CampaignPaymentException)
async def campaign_payment_exception_handler(request, exc: CampaignPaymentException):
    """Handle campaign payment exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


app.include_router(webhooks.router)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "campaign-payments",
        "version": "1.0.0",
    }
