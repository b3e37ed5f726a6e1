from sqlalchemy import Column, String, DateTime, Boolean, Integer, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from campaign_payments.config.database import Base
from datetime import datetime
import uuid
import enum


class ActionType(str, enum.Enum):
    FOLLOW = "follow"
    LIKE = "like"


class CampaignAction(Base):
    __tablename__ = "campaign_actions"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(String(128), ForeignKey("campaigns.id"), nullable=False, index=True)
    action_type = Column(SQLEnum(ActionType), nullable=False)
    target = Column(String(2048), nullable=False)  # decoded URL or handle
    price_per_action = Column(Integer, nullable=False)  # cents
    max_volume = Column(Integer, nullable=False)
    current_volume = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    campaign = relationship("Campaign", back_populates="actions")
