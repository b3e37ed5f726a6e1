from sqlalchemy import Column, String, DateTime, Boolean, BigInteger, ForeignKey, Index, Uuid, Enum as SQLEnum, JSON
from sqlalchemy.orm import relationship
from campaign_payments.config.database import Base
from datetime import datetime
import enum


class CampaignStatus(str, enum.Enum):
    PENDING_PAYMENT = "pending_payment"
    ACTIVE = "active"


class Campaign(Base):
    __tablename__ = "campaigns"
    
    # Campaign ids are generated by the web app and carried on-chain
    id = Column(String(128), primary_key=True)
    brand_id = Column(Uuid, ForeignKey("brands.id"), nullable=False, index=True)
    brand_wallet_address = Column(String(42), nullable=False, index=True)
    platform = Column(String(32), nullable=False, default="tiktok")
    targeting_rules = Column(JSON, default={}, nullable=False)
    total_budget = Column(BigInteger, nullable=False)  # cents
    remaining_budget = Column(BigInteger, nullable=False)  # cents
    status = Column(SQLEnum(CampaignStatus), default=CampaignStatus.PENDING_PAYMENT, nullable=False, index=True)
    is_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    brand = relationship("Brand", back_populates="campaigns")
    actions = relationship("CampaignAction", back_populates="campaign", cascade="all, delete-orphan")
    payment = relationship("Payment", back_populates="campaign", uselist=False)
    
    __table_args__ = (
        Index("ix_campaign_brand_status", "brand_id", "status"),
    )
