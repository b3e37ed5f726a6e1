from campaign_payments.models.brand import Brand, BrandWallet
from campaign_payments.models.campaign import Campaign, CampaignStatus
from campaign_payments.models.campaign_action import CampaignAction, ActionType
from campaign_payments.models.action import Action
from campaign_payments.models.payment import Payment, PaymentStatus

__all__ = [
    "Brand",
    "BrandWallet",
    "Campaign",
    "CampaignStatus",
    "CampaignAction",
    "ActionType",
    "Action",
    "Payment",
    "PaymentStatus",
]
