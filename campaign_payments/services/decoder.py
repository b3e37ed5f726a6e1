"""
Decoding of the campaign-payments contract call and its payment event.

The call input says what the brand asked for; the CampaignPaymentReceived
log says what was actually paid. Both must be present and agree on the
campaign id before anything is persisted.
"""
from datetime import datetime, timezone
from typing import List, NamedTuple, Optional, Sequence, Tuple

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, event_signature_to_log_topic, function_signature_to_4byte_selector, keccak

from campaign_payments.schemas import (
    ActionSpec,
    CampaignRequirements,
    ConfirmedPayment,
    DecodedPaymentIntent,
    LogEntry,
)
from campaign_payments.utils.exceptions import (
    IntentEventMismatchException,
    MissingPaymentEventException,
    PaymentDecodeException,
)


DEPOSIT_FUNCTION_SIGNATURE = (
    "depositForCampaignWithPermit("
    "string,"
    "(bool,uint256,uint256,string,string),"
    "(string,uint256,string[],uint256),"
    "uint256,uint8,bytes32,bytes32)"
)
DEPOSIT_ARGUMENT_TYPES = [
    "string",                                  # campaignId
    "(bool,uint256,uint256,string,string)",    # requirements
    "(string,uint256,string[],uint256)",       # actionSpec
    "uint256",                                 # permit deadline
    "uint8",                                   # permit v
    "bytes32",                                 # permit r
    "bytes32",                                 # permit s
]
DEPOSIT_SELECTOR = function_signature_to_4byte_selector(DEPOSIT_FUNCTION_SIGNATURE)

# event CampaignPaymentReceived(string indexed campaignId, address indexed sender, uint256 amount, uint256 timestamp)
PAYMENT_EVENT_SIGNATURE = "CampaignPaymentReceived(string,address,uint256,uint256)"
PAYMENT_EVENT_TOPIC = event_signature_to_log_topic(PAYMENT_EVENT_SIGNATURE)

MINOR_UNIT_DECIMALS = 2


class PaymentEvent(NamedTuple):
    campaign_topic: bytes  # keccak256 of the campaign id (indexed string)
    sender: str
    amount: int
    timestamp: int
    log_index: int


def _hex_to_bytes(value: str) -> Optional[bytes]:
    try:
        return decode_hex(value)
    except (ValueError, TypeError):
        return None


def to_minor_units(amount_base_units: int, token_decimals: int) -> int:
    """
    Convert a token amount to cents, rounding down.

    1234567 base units of a 6-decimal token is 123 cents.
    """
    shift = token_decimals - MINOR_UNIT_DECIMALS
    if shift >= 0:
        return amount_base_units // (10 ** shift)
    return amount_base_units * (10 ** -shift)


def decode_call_input(call_input: str, transaction_hash: Optional[str] = None) -> DecodedPaymentIntent:
    """
    Decode depositForCampaignWithPermit calldata.

    Permit fields (deadline, v, r, s) are decoded and dropped.

    Raises:
        PaymentDecodeException
    """
    data = _hex_to_bytes(call_input)
    if data is None:
        raise PaymentDecodeException("Call input is not valid hex", field="input", transaction_hash=transaction_hash)

    if data[:4] != DEPOSIT_SELECTOR:
        raise PaymentDecodeException(
            f"Unexpected function selector 0x{data[:4].hex()}",
            field="selector",
            transaction_hash=transaction_hash,
        )

    try:
        campaign_id, requirements, action_spec, _deadline, _v, _r, _s = decode(DEPOSIT_ARGUMENT_TYPES, data[4:])
    except (DecodingError, ValueError) as e:
        raise PaymentDecodeException(
            f"Call input does not match {DEPOSIT_FUNCTION_SIGNATURE}: {e}",
            field="input",
            transaction_hash=transaction_hash,
        )

    if not campaign_id:
        raise PaymentDecodeException("Empty campaign id", field="campaignId", transaction_hash=transaction_hash)

    verified_only, min_followers, min_unique_views, location, language = requirements
    follow_target, follow_count, like_targets, like_count_per_target = action_spec

    return DecodedPaymentIntent(
        campaign_id=campaign_id,
        requirements=CampaignRequirements(
            verified_only=verified_only,
            min_followers=min_followers,
            min_unique_views=min_unique_views,
            location_filter=location,
            language_filter=language,
        ),
        action_spec=ActionSpec(
            follow_target=follow_target,
            follow_count=follow_count,
            like_targets=tuple(like_targets),
            like_count_per_target=like_count_per_target,
        ),
    )


def try_decode_payment_event(log: LogEntry, log_index: int) -> Optional[PaymentEvent]:
    """Decode a log as CampaignPaymentReceived, or return None if it is another event."""
    if len(log.topics) != 3:
        return None

    topics = [_hex_to_bytes(topic) for topic in log.topics]
    if any(topic is None or len(topic) != 32 for topic in topics):
        return None
    if topics[0] != PAYMENT_EVENT_TOPIC:
        return None

    data = _hex_to_bytes(log.data)
    if data is None:
        return None

    try:
        (sender,) = decode(["address"], topics[2])
        amount, timestamp = decode(["uint256", "uint256"], data)
    except DecodingError:
        return None

    return PaymentEvent(
        campaign_topic=topics[1],
        sender=sender.lower(),
        amount=amount,
        timestamp=timestamp,
        log_index=log_index,
    )


def find_payment_event(logs: Sequence[LogEntry], contract_address: str) -> Optional[PaymentEvent]:
    """
    Return the first CampaignPaymentReceived emitted by the contract.

    A transaction emits many logs (token transfers, approvals); anything
    from another address or with another shape is passed over.
    """
    contract_address = contract_address.lower()
    for position, log in enumerate(logs):
        if log.address.lower() != contract_address:
            continue
        log_index = log.log_index if log.log_index is not None else position
        event = try_decode_payment_event(log, log_index)
        if event is not None:
            return event
    return None


def decode_campaign_payment(
    call_input: str,
    logs: List[LogEntry],
    contract_address: str,
    transaction_hash: str,
    block_number: Optional[int] = None,
    token_decimals: int = 6,
) -> Tuple[DecodedPaymentIntent, ConfirmedPayment]:
    """
    Decode the payment intent and the confirmed payment of a transaction.

    Args:
        call_input: Hex calldata of the transaction
        logs: Event logs emitted by the transaction
        contract_address: Campaign payments contract
        transaction_hash: Hash of the transaction, for error context
        block_number: Block the transaction was mined in
        token_decimals: Decimals of the payment token

    Returns:
        Tuple of (DecodedPaymentIntent, ConfirmedPayment)

    Raises:
        PaymentDecodeException
        MissingPaymentEventException
        IntentEventMismatchException
    """
    intent = decode_call_input(call_input, transaction_hash)

    event = find_payment_event(logs, contract_address)
    if event is None:
        raise MissingPaymentEventException(transaction_hash=transaction_hash)

    if event.campaign_topic != keccak(text=intent.campaign_id):
        raise IntentEventMismatchException(intent.campaign_id, event.log_index, transaction_hash)

    try:
        paid_at = datetime.fromtimestamp(event.timestamp, tz=timezone.utc).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError):
        raise PaymentDecodeException(
            f"Event timestamp out of range: {event.timestamp}",
            field="timestamp",
            log_index=event.log_index,
            transaction_hash=transaction_hash,
        )

    payment = ConfirmedPayment(
        amount_base_units=event.amount,
        amount_minor_units=to_minor_units(event.amount, token_decimals),
        timestamp=paid_at,
        sender_address=event.sender,
        transaction_hash=transaction_hash.lower(),
        block_number=block_number,
        contract_address=contract_address.lower(),
        log_index=event.log_index,
    )

    return intent, payment
