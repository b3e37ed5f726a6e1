from campaign_payments.utils.signature import verify_tenderly_signature
from factories import DATE_HEADER, sign


BODY = b'{"event_type":"ALERT","id":"abc"}'
KEY = "whsec-tenderly"


def test_valid_signature():
    signature = sign(BODY, DATE_HEADER, KEY)
    assert verify_tenderly_signature(BODY, signature, DATE_HEADER, KEY)


def test_secret_may_be_bytes():
    signature = sign(BODY, DATE_HEADER, KEY)
    assert verify_tenderly_signature(BODY, signature, DATE_HEADER, KEY.encode())


def test_signature_is_over_body_then_timestamp():
    # Signing the timestamp first must not verify
    import hashlib
    import hmac

    swapped = hmac.new(KEY.encode(), DATE_HEADER.encode() + BODY, hashlib.sha256).hexdigest()
    assert not verify_tenderly_signature(BODY, swapped, DATE_HEADER, KEY)


def test_tampered_body_rejected():
    signature = sign(BODY, DATE_HEADER, KEY)
    assert not verify_tenderly_signature(BODY + b" ", signature, DATE_HEADER, KEY)


def test_tampered_timestamp_rejected():
    signature = sign(BODY, DATE_HEADER, KEY)
    assert not verify_tenderly_signature(BODY, signature, "Sat, 17 Oct 2026 10:00:01 GMT", KEY)


def test_wrong_key_rejected():
    signature = sign(BODY, DATE_HEADER, "other-key")
    assert not verify_tenderly_signature(BODY, signature, DATE_HEADER, KEY)


def test_missing_headers_rejected():
    signature = sign(BODY, DATE_HEADER, KEY)
    assert not verify_tenderly_signature(BODY, None, DATE_HEADER, KEY)
    assert not verify_tenderly_signature(BODY, "", DATE_HEADER, KEY)
    assert not verify_tenderly_signature(BODY, signature, None, KEY)


def test_unconfigured_secret_rejects_everything():
    signature = sign(BODY, DATE_HEADER, "")
    assert not verify_tenderly_signature(BODY, signature, DATE_HEADER, "")


def test_non_ascii_signature_does_not_raise():
    assert not verify_tenderly_signature(BODY, "ünïcode", DATE_HEADER, KEY)
