from datetime import datetime

import pytest

from campaign_payments.schemas import LogEntry
from campaign_payments.services.decoder import (
    decode_call_input,
    decode_campaign_payment,
    find_payment_event,
    to_minor_units,
)
from campaign_payments.utils.exceptions import (
    IntentEventMismatchException,
    MissingPaymentEventException,
    PaymentDecodeException,
)
from campaign_payments.utils.target_codec import encode_target
from factories import (
    CONTRACT_ADDRESS,
    FOLLOW_URL,
    LIKE_URLS,
    SENDER_ADDRESS,
    TX_HASH,
    build_deposit_input,
    build_payment_log,
    build_transfer_log,
)


def _logs(*entries):
    return [LogEntry(**entry) for entry in entries]


def test_to_minor_units_rounds_down():
    assert to_minor_units(1_234_567, 6) == 123
    assert to_minor_units(12_000_000, 6) == 1200
    assert to_minor_units(9_999, 6) == 0


def test_to_minor_units_for_low_decimal_tokens():
    assert to_minor_units(5, 0) == 500
    assert to_minor_units(5, 2) == 5


def test_decode_call_input():
    intent = decode_call_input(build_deposit_input(campaign_id="cmp_42", like_count_per_target=3))

    assert intent.campaign_id == "cmp_42"
    assert intent.requirements.verified_only is True
    assert intent.requirements.min_followers == 1000
    assert intent.requirements.min_unique_views == 500
    assert intent.requirements.location_filter == "US"
    assert intent.requirements.language_filter == "en"
    assert intent.action_spec.follow_target == encode_target(FOLLOW_URL)
    assert intent.action_spec.follow_count == 10
    assert intent.action_spec.like_targets == tuple(encode_target(url) for url in LIKE_URLS)
    assert intent.action_spec.like_count_per_target == 3


def test_decode_call_input_rejects_other_function():
    data = build_deposit_input()
    other_selector = "0xdeadbeef" + data[10:]

    with pytest.raises(PaymentDecodeException) as exc_info:
        decode_call_input(other_selector, TX_HASH)

    assert exc_info.value.field == "selector"
    assert exc_info.value.transaction_hash == TX_HASH


def test_decode_call_input_rejects_truncated_data():
    data = build_deposit_input()

    with pytest.raises(PaymentDecodeException) as exc_info:
        decode_call_input(data[:200])

    assert exc_info.value.field == "input"


def test_decode_call_input_rejects_non_hex():
    with pytest.raises(PaymentDecodeException) as exc_info:
        decode_call_input("0xnot-hex")

    assert exc_info.value.field == "input"


def test_find_payment_event_skips_unrelated_logs():
    foreign_payment = build_payment_log(address="0x2222222222222222222222222222222222222222")
    logs = _logs(build_transfer_log(), foreign_payment, build_payment_log(amount=7_000_000))

    event = find_payment_event(logs, CONTRACT_ADDRESS.upper().replace("0X", "0x"))

    assert event is not None
    assert event.amount == 7_000_000
    assert event.sender == SENDER_ADDRESS
    assert event.log_index == 2


def test_find_payment_event_skips_other_contract_events():
    price_calculated = {
        "address": CONTRACT_ADDRESS,
        "topics": ["0x" + "00" * 32, "0x" + "01" * 32],
        "data": "0x",
    }
    assert find_payment_event(_logs(price_calculated), CONTRACT_ADDRESS) is None


def test_find_payment_event_prefers_explicit_log_index():
    log = build_payment_log()
    log["log_index"] = 17

    event = find_payment_event(_logs(log), CONTRACT_ADDRESS)

    assert event.log_index == 17


def test_decode_campaign_payment():
    intent, payment = decode_campaign_payment(
        call_input=build_deposit_input(campaign_id="cmp_001"),
        logs=_logs(build_transfer_log(), build_payment_log(campaign_id="cmp_001", amount=1_234_567)),
        contract_address=CONTRACT_ADDRESS,
        transaction_hash=TX_HASH.upper().replace("0X", "0x"),
        block_number=42,
        token_decimals=6,
    )

    assert intent.campaign_id == "cmp_001"
    assert payment.amount_base_units == 1_234_567
    assert payment.amount_minor_units == 123
    assert payment.timestamp == datetime(2025, 10, 9, 8, 53, 20)
    assert payment.sender_address == SENDER_ADDRESS
    assert payment.transaction_hash == TX_HASH
    assert payment.block_number == 42
    assert payment.log_index == 1


def test_call_input_alone_is_not_enough():
    with pytest.raises(MissingPaymentEventException) as exc_info:
        decode_campaign_payment(
            call_input=build_deposit_input(),
            logs=_logs(build_transfer_log()),
            contract_address=CONTRACT_ADDRESS,
            transaction_hash=TX_HASH,
        )

    assert exc_info.value.transaction_hash == TX_HASH


def test_event_for_another_campaign_is_fatal():
    with pytest.raises(IntentEventMismatchException) as exc_info:
        decode_campaign_payment(
            call_input=build_deposit_input(campaign_id="cmp_001"),
            logs=_logs(build_payment_log(campaign_id="cmp_999")),
            contract_address=CONTRACT_ADDRESS,
            transaction_hash=TX_HASH,
        )

    assert exc_info.value.field == "campaignId"
    assert exc_info.value.log_index == 0
