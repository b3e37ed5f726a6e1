from fastapi import HTTPException, status
from typing import Optional


INTERNAL_ERROR_MESSAGE = "Internal server error"


class CampaignPaymentException(HTTPException):
    """Base exception for campaign payment processing."""
    pass


# ============== Authentication ==============

class MissingSignatureException(CampaignPaymentException):
    def __init__(self):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing signature")


class InvalidSignatureException(CampaignPaymentException):
    def __init__(self):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")


# ============== Decoding ==============

class PaymentDecodeException(CampaignPaymentException):
    """
    Malformed envelope, call input or payment event.
    
    The response body never carries the reason; it is kept on the
    exception for the operator log together with the location of the
    failure (field name and/or log index) and the transaction hash.
    """
    
    def __init__(
        self,
        reason: str,
        field: Optional[str] = None,
        log_index: Optional[int] = None,
        transaction_hash: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_MESSAGE,
        )
        self.reason = reason
        self.field = field
        self.log_index = log_index
        self.transaction_hash = transaction_hash
    
    def log_context(self) -> dict:
        return {
            "reason": self.reason,
            "field": self.field,
            "log_index": self.log_index,
            "transaction_hash": self.transaction_hash,
        }


class MalformedEnvelopeException(PaymentDecodeException):
    pass


class MissingPaymentEventException(PaymentDecodeException):
    def __init__(self, transaction_hash: Optional[str] = None):
        super().__init__(
            reason="No CampaignPaymentReceived event emitted by the contract",
            field="logs",
            transaction_hash=transaction_hash,
        )


class IntentEventMismatchException(PaymentDecodeException):
    def __init__(self, campaign_id: str, log_index: Optional[int], transaction_hash: Optional[str] = None):
        super().__init__(
            reason=f"Payment event does not belong to campaign {campaign_id}",
            field="campaignId",
            log_index=log_index,
            transaction_hash=transaction_hash,
        )


# ============== Business rules ==============

class UnregisteredSenderException(CampaignPaymentException):
    def __init__(self, sender_address: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_MESSAGE,
        )
        self.sender_address = sender_address
