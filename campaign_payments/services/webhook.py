from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import ValidationError
from campaign_payments.config.settings import settings
from campaign_payments.schemas import AlertEnvelope, webhook_envelope_adapter
from campaign_payments.services.chain import ChainClient
from campaign_payments.services.decoder import decode_campaign_payment
from campaign_payments.services.materializer import materialize_campaign_payment
from campaign_payments.utils.exceptions import MalformedEnvelopeException
from campaign_payments.utils.logger import logger
from typing import Optional
import enum


class WebhookOutcome(str, enum.Enum):
    IGNORED = "ignored"
    PROCESSED = "processed"


def parse_envelope(raw_body: bytes):
    """
    Parse a Tenderly webhook body into an AlertEnvelope or OtherEnvelope.

    Raises:
        MalformedEnvelopeException
    """
    try:
        return webhook_envelope_adapter.validate_json(raw_body)
    except ValidationError as e:
        first_error = e.errors()[0] if e.errors() else {}
        location = ".".join(str(part) for part in first_error.get("loc", ()))
        raise MalformedEnvelopeException(
            f"Invalid webhook envelope: {first_error.get('msg', 'validation failed')}",
            field=location or None,
        )


async def process_campaign_payment_webhook(
    raw_body: bytes,
    session: AsyncSession,
    chain_client: Optional[ChainClient] = None,
) -> WebhookOutcome:
    """
    Process an authenticated Tenderly webhook body.

    The signature must already have been verified by the caller.

    Args:
        raw_body: Raw request body bytes
        session: AsyncSession for database
        chain_client: Used to fetch receipt logs when the alert has none

    Returns:
        WebhookOutcome.IGNORED for heartbeats, other alert types and
        transactions to other contracts; WebhookOutcome.PROCESSED when
        the campaign exists (newly created or re-delivered)

    Raises:
        PaymentDecodeException
        UnregisteredSenderException
    """
    envelope = parse_envelope(raw_body)

    if not isinstance(envelope, AlertEnvelope) or envelope.transaction is None:
        logger.info(
            "Not an ALERT event or missing transaction data, ignoring",
            extra={"event_type": envelope.event_type},
        )
        return WebhookOutcome.IGNORED

    tx = envelope.transaction
    contract_address = settings.CAMPAIGN_PAYMENTS_CONTRACT_ADDRESS.lower()

    if not tx.to or tx.to.lower() != contract_address:
        logger.info(
            "Transaction not sent to campaign contract, ignoring",
            extra={"transaction_hash": tx.hash},
        )
        return WebhookOutcome.IGNORED

    if not tx.hash:
        raise MalformedEnvelopeException("Alert transaction has no hash", field="transaction.hash")

    logs = tx.logs
    if not logs and chain_client is not None:
        logger.info("Alert carries no logs, fetching receipt", extra={"transaction_hash": tx.hash})
        logs = await chain_client.get_transaction_logs(tx.hash)

    intent, payment = decode_campaign_payment(
        call_input=tx.input,
        logs=logs,
        contract_address=contract_address,
        transaction_hash=tx.hash,
        block_number=tx.block_number,
        token_decimals=settings.TOKEN_DECIMALS,
    )

    if tx.from_address and payment.sender_address != tx.from_address.lower():
        logger.warning(
            "Payment event sender differs from transaction sender",
            extra={"transaction_hash": tx.hash, "sender": payment.sender_address},
        )

    await materialize_campaign_payment(intent, payment, session)
    return WebhookOutcome.PROCESSED
