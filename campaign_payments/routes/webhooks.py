from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession
from campaign_payments.config.database import get_db
from campaign_payments.config.settings import settings
from campaign_payments.schemas import HealthResponse, WebhookAckResponse
from campaign_payments.services.chain import ChainClient
from campaign_payments.services.webhook import process_campaign_payment_webhook
from campaign_payments.utils.exceptions import InvalidSignatureException, MissingSignatureException
from campaign_payments.utils.logger import logger
from campaign_payments.utils.signature import verify_tenderly_signature
from datetime import datetime, timezone
from typing import Optional
from slowapi import Limiter
from slowapi.util import get_remote_address

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
limiter = Limiter(key_func=get_remote_address)


def get_chain_client(request: Request) -> Optional[ChainClient]:
    """Dependency for the chain client built in the app lifespan."""
    return getattr(request.app.state, "chain_client", None)


@router.post("/campaign-payments", response_model=WebhookAckResponse, status_code=status.HTTP_200_OK)
@limiter.limit(lambda: settings.WEBHOOK_RATE_LIMIT)
async def campaign_payment_webhook(
    request: Request,
    session: AsyncSession = Depends(get_db),
    chain_client: Optional[ChainClient] = Depends(get_chain_client),
):
    """
    Handle Tenderly alerts for the campaign payments contract.

    - Verify the Tenderly signature over the raw body and date header
    - Decode the deposit call and its CampaignPaymentReceived event
    - Create and activate the campaign exactly once per transaction

    Anything that is not an alert for our contract is acknowledged and ignored.
    """
    signature = request.headers.get("x-tenderly-signature")
    timestamp = request.headers.get("date")

    if not signature or not timestamp:
        logger.warning("Missing Tenderly signature headers")
        raise MissingSignatureException()

    body = await request.body()

    if not verify_tenderly_signature(body, signature, timestamp, settings.TENDERLY_WEBHOOK_SIGNING_KEY):
        logger.warning("Tenderly signature verification failed")
        raise InvalidSignatureException()

    outcome = await process_campaign_payment_webhook(body, session, chain_client)
    logger.info(f"Webhook handled: {outcome.value}")

    return WebhookAckResponse(success=True)


@router.get("/campaign-payments", response_class=PlainTextResponse)
async def campaign_payment_webhook_verification():
    """Tenderly registration handshake; always 200 OK."""
    return PlainTextResponse("OK", status_code=status.HTTP_200_OK)


@router.get("/health", response_model=HealthResponse)
async def webhook_health():
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
