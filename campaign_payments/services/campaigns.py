from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from campaign_payments.models import (
    Action,
    Brand,
    BrandWallet,
    Campaign,
    CampaignAction,
    CampaignStatus,
    Payment,
)
from datetime import datetime
from typing import List, Optional


async def find_brand_by_wallet_address(wallet_address: str, session: AsyncSession) -> Optional[Brand]:
    """Get the brand that registered this wallet address (case-insensitive)."""
    result = await session.execute(
        select(Brand)
        .join(BrandWallet, BrandWallet.brand_id == Brand.id)
        .where(func.lower(BrandWallet.wallet_address) == wallet_address.lower())
    )
    return result.scalar_one_or_none()


async def find_payment_by_tx_hash(transaction_hash: str, session: AsyncSession) -> Optional[Payment]:
    """Get the payment recorded for an on-chain transaction."""
    result = await session.execute(
        select(Payment).where(Payment.transaction_hash == transaction_hash.lower())
    )
    return result.scalar_one_or_none()


async def find_campaign(campaign_id: str, session: AsyncSession) -> Optional[Campaign]:
    result = await session.execute(
        select(Campaign).where(Campaign.id == campaign_id)
    )
    return result.scalar_one_or_none()


async def find_existing_campaign(
    transaction_hash: str,
    campaign_id: str,
    session: AsyncSession,
) -> Optional[Campaign]:
    """
    Get the campaign already materialized for this delivery.

    Looks up by transaction hash first, then by campaign id.
    """
    payment = await find_payment_by_tx_hash(transaction_hash, session)
    if payment:
        return await find_campaign(payment.campaign_id, session)

    return await find_campaign(campaign_id, session)


async def insert_campaign_with_actions_and_payment(
    campaign: Campaign,
    actions: List[CampaignAction],
    payment: Payment,
    session: AsyncSession,
) -> Campaign:
    """
    Stage a campaign, its actions and its payment in the current transaction.

    Nothing is committed here; unique constraint violations on the campaign
    id or transaction hash surface as IntegrityError at flush.

    Raises:
        sqlalchemy.exc.IntegrityError
    """
    session.add(campaign)
    await session.flush()

    for action in actions:
        action.campaign_id = campaign.id
    session.add_all(actions)

    payment.campaign_id = campaign.id
    session.add(payment)

    await session.flush()
    return campaign


async def activate_campaign(campaign_id: str, session: AsyncSession) -> None:
    """Promote a campaign and all of its actions to active."""
    now = datetime.utcnow()

    await session.execute(
        update(Campaign)
        .where(Campaign.id == campaign_id)
        .values(status=CampaignStatus.ACTIVE, is_active=True, updated_at=now)
    )
    await session.execute(
        update(CampaignAction)
        .where(CampaignAction.campaign_id == campaign_id)
        .values(is_active=True)
    )
    await session.flush()



async def create_trackable_actions(campaign: Campaign, session: AsyncSession) -> List[Action]:
    """
    Publish a campaign's actions as trackable actions for extension users.

    Each Action reuses the id of the CampaignAction it mirrors. Runs in the
    caller's transaction, after the campaign actions are flushed.
    """
    result = await session.execute(
        select(CampaignAction).where(CampaignAction.campaign_id == campaign.id)
    )
    campaign_actions = result.scalars().all()

    trackable = [
        Action(
            id=campaign_action.id,
            platform=campaign.platform,
            action_type=campaign_action.action_type,
            target=campaign_action.target,
            title=f"{campaign.platform} {campaign_action.action_type.value}",
            description=f"{campaign_action.action_type.value} on {campaign.platform}",
            price=campaign_action.price_per_action,
            max_volume=campaign_action.max_volume,
            current_volume=0,
            is_active=True,
            meta={
                "campaign_id": campaign.id,
                "campaign_action_id": str(campaign_action.id),
            },
        )
        for campaign_action in campaign_actions
    ]
    session.add_all(trackable)

    await session.flush()
    return trackable
