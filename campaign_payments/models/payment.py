from sqlalchemy import Column, String, DateTime, BigInteger, ForeignKey, Index, Uuid, Enum as SQLEnum, JSON
from sqlalchemy.orm import relationship
from campaign_payments.config.database import Base
from datetime import datetime
import uuid
import enum


class PaymentStatus(str, enum.Enum):
    COMPLETED = "completed"


class Payment(Base):
    __tablename__ = "payments"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(String(128), ForeignKey("campaigns.id"), nullable=False, unique=True, index=True)
    brand_id = Column(Uuid, ForeignKey("brands.id"), nullable=False, index=True)
    from_address = Column(String(42), nullable=False)
    to_address = Column(String(42), nullable=False)
    amount = Column(BigInteger, nullable=False)  # cents
    currency = Column(String(10), nullable=False, default="USDC")
    transaction_hash = Column(String(66), unique=True, index=True, nullable=False)
    block_number = Column(BigInteger, nullable=True)
    status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.COMPLETED, nullable=False)
    paid_at = Column(DateTime, nullable=False)  # block timestamp from the payment event
    meta = Column(JSON, default={}, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    
    # Relationships
    campaign = relationship("Campaign", back_populates="payment")
    
    __table_args__ = (
        Index("ix_payment_brand_created", "brand_id", "created_at"),
    )
