import hashlib
import hmac
from typing import Optional, Union


def verify_tenderly_signature(
    raw_body: bytes,
    signature: Optional[str],
    timestamp: Optional[str],
    secret: Union[str, bytes],
) -> bool:
    """
    Verify a Tenderly webhook signature.
    
    Tenderly signs the raw body followed by the `date` header value, with no
    separator, using HMAC-SHA256 and sends the hex digest in
    `x-tenderly-signature`.
    
    Args:
        raw_body: Raw request body bytes
        signature: x-tenderly-signature header value
        timestamp: date header value, used verbatim
        secret: Webhook signing key
    
    Returns:
        True if the signature matches, False otherwise (never raises)
    """
    if not signature or not timestamp or not secret:
        return False
    
    if isinstance(secret, str):
        secret = secret.encode()
    
    try:
        message = raw_body + timestamp.encode("utf-8")
        provided = signature.strip().lower().encode("ascii")
    except (UnicodeEncodeError, TypeError):
        return False
    
    computed_signature = hmac.new(secret, message, hashlib.sha256).hexdigest()
    
    return hmac.compare_digest(computed_signature.encode("ascii"), provided)
