from pydantic import BaseModel, Field, Discriminator, Tag, TypeAdapter
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, List, Tuple, Union


# ============== Tenderly Webhook Envelope ==============

class LogEntry(BaseModel):
    address: str
    topics: List[str] = []
    data: str = "0x"
    log_index: Optional[int] = None


class TransactionPayload(BaseModel):
    hash: Optional[str] = None
    from_address: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    input: str = "0x"
    block_number: Optional[int] = None
    logs: List[LogEntry] = []

    class Config:
        populate_by_name = True


class AlertEnvelope(BaseModel):
    event_type: Literal["ALERT"]
    id: Optional[str] = None
    transaction: Optional[TransactionPayload] = None


class OtherEnvelope(BaseModel):
    event_type: Optional[str] = None
    id: Optional[str] = None


def _envelope_tag(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        event_type = value.get("event_type")
    elif isinstance(value, BaseModel):
        event_type = getattr(value, "event_type", None)
    else:
        return None
    return "alert" if event_type == "ALERT" else "other"


WebhookEnvelope = Annotated[
    Union[
        Annotated[AlertEnvelope, Tag("alert")],
        Annotated[OtherEnvelope, Tag("other")],
    ],
    Discriminator(_envelope_tag),
]

webhook_envelope_adapter = TypeAdapter(WebhookEnvelope)


# ============== Decoded Payment Schemas ==============

class CampaignRequirements(BaseModel):
    verified_only: bool
    min_followers: int
    min_unique_views: int
    location_filter: str
    language_filter: str

    class Config:
        frozen = True


class ActionSpec(BaseModel):
    follow_target: str  # obfuscated
    follow_count: int
    like_targets: Tuple[str, ...]  # obfuscated
    like_count_per_target: int

    class Config:
        frozen = True


class DecodedPaymentIntent(BaseModel):
    campaign_id: str
    requirements: CampaignRequirements
    action_spec: ActionSpec

    class Config:
        frozen = True


class ConfirmedPayment(BaseModel):
    amount_base_units: int
    amount_minor_units: int
    timestamp: datetime
    sender_address: str
    transaction_hash: str
    block_number: Optional[int] = None
    contract_address: str
    log_index: int

    class Config:
        frozen = True


# ============== Responses ==============

class WebhookAckResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
