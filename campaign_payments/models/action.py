from sqlalchemy import Column, String, DateTime, Boolean, Integer, Uuid, Enum as SQLEnum, JSON, Text
from campaign_payments.config.database import Base
from campaign_payments.models.campaign_action import ActionType
from datetime import datetime
import uuid


class Action(Base):
    """
    Trackable action offered to extension users.

    Created when a campaign is activated, one per CampaignAction and
    sharing its id; meta links back to the campaign.
    """
    __tablename__ = "actions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    platform = Column(String(32), nullable=False)
    action_type = Column(SQLEnum(ActionType), nullable=False)
    target = Column(String(2048), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Integer, nullable=False)  # cents
    max_volume = Column(Integer, nullable=False)
    current_volume = Column(Integer, default=0, nullable=False)
    eligibility_criteria = Column(JSON, default={}, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=True)
    meta = Column(JSON, default={}, nullable=True)  # {"campaign_id": ..., "campaign_action_id": ...}
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
