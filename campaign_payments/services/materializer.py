from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from campaign_payments.config.settings import settings
from campaign_payments.models import (
    ActionType,
    Campaign,
    CampaignAction,
    CampaignStatus,
    Payment,
    PaymentStatus,
)
from campaign_payments.schemas import ActionSpec, ConfirmedPayment, DecodedPaymentIntent
from campaign_payments.services.campaigns import (
    activate_campaign,
    create_trackable_actions,
    find_brand_by_wallet_address,
    find_existing_campaign,
    insert_campaign_with_actions_and_payment,
)
from campaign_payments.utils.exceptions import UnregisteredSenderException
from campaign_payments.utils.logger import logger
from campaign_payments.utils.target_codec import TargetCodecVersion, decode_target
from typing import List, Optional, Union


def build_campaign_actions(
    action_spec: ActionSpec,
    codec_version: Union[TargetCodecVersion, str],
) -> List[CampaignAction]:
    """
    Derive campaign actions from the on-chain action spec.

    One follow action when follow_count > 0 and the follow target decodes
    to something; one like action per distinct non-empty decoded like
    target when like_count_per_target > 0. Prices come from the fixed
    price table.
    """
    actions = []
    seen_like_targets = set()

    if action_spec.follow_count > 0:
        follow_target = decode_target(action_spec.follow_target, codec_version)
        if follow_target:
            actions.append(
                CampaignAction(
                    action_type=ActionType.FOLLOW,
                    target=follow_target,
                    price_per_action=settings.FOLLOW_PRICE_CENTS,
                    max_volume=action_spec.follow_count,
                    current_volume=0,
                    is_active=False,
                )
            )

    if action_spec.like_count_per_target > 0:
        for encoded_target in action_spec.like_targets:
            like_target = decode_target(encoded_target, codec_version)
            if not like_target or like_target in seen_like_targets:
                continue
            seen_like_targets.add(like_target)
            actions.append(
                CampaignAction(
                    action_type=ActionType.LIKE,
                    target=like_target,
                    price_per_action=settings.LIKE_PRICE_CENTS,
                    max_volume=action_spec.like_count_per_target,
                    current_volume=0,
                    is_active=False,
                )
            )

    return actions


async def materialize_campaign_payment(
    intent: DecodedPaymentIntent,
    payment: ConfirmedPayment,
    session: AsyncSession,
    codec_version: Optional[Union[TargetCodecVersion, str]] = None,
) -> Campaign:
    """
    Create and activate the campaign paid for by a confirmed payment.

    Re-delivery of the same transaction (or of the same campaign id) is a
    no-op that returns the existing campaign, including when a concurrent
    delivery wins the race to insert.

    Args:
        intent: Decoded call input
        payment: Confirmed payment from the contract event
        session: AsyncSession; committed or rolled back here
        codec_version: Target codec, defaults to TARGET_CODEC_VERSION

    Returns:
        The active Campaign

    Raises:
        UnregisteredSenderException
    """
    log_context = {
        "transaction_hash": payment.transaction_hash,
        "campaign_id": intent.campaign_id,
    }

    existing = await find_existing_campaign(payment.transaction_hash, intent.campaign_id, session)
    if existing:
        logger.info("Duplicate delivery, campaign already exists", extra=log_context)
        return existing

    brand = await find_brand_by_wallet_address(payment.sender_address, session)
    if not brand:
        logger.error(
            "No brand registered for sender wallet",
            extra={**log_context, "sender": payment.sender_address},
        )
        raise UnregisteredSenderException(payment.sender_address)

    actions = build_campaign_actions(
        intent.action_spec,
        codec_version or settings.TARGET_CODEC_VERSION,
    )
    if not actions:
        logger.warning("Campaign has no actions", extra=log_context)

    requirements = intent.requirements
    campaign = Campaign(
        id=intent.campaign_id,
        brand_id=brand.id,
        brand_wallet_address=payment.sender_address.lower(),
        platform=settings.CAMPAIGN_PLATFORM,
        targeting_rules={
            "verified_only": requirements.verified_only,
            "min_followers": requirements.min_followers,
            "min_unique_views": requirements.min_unique_views,
            "location": requirements.location_filter,
            "language": requirements.language_filter,
        },
        total_budget=payment.amount_minor_units,
        remaining_budget=payment.amount_minor_units,
        status=CampaignStatus.PENDING_PAYMENT,
        is_active=False,
    )
    payment_record = Payment(
        brand_id=brand.id,
        from_address=payment.sender_address.lower(),
        to_address=payment.contract_address.lower(),
        amount=payment.amount_minor_units,
        currency=settings.PAYMENT_CURRENCY,
        transaction_hash=payment.transaction_hash.lower(),
        block_number=payment.block_number,
        status=PaymentStatus.COMPLETED,
        paid_at=payment.timestamp,
        meta={
            "network": settings.NETWORK,
            "amount_base_units": str(payment.amount_base_units),
            "log_index": payment.log_index,
        },
    )

    # Campaign, actions, payment and trackable actions are written in one transaction
    try:
        await insert_campaign_with_actions_and_payment(campaign, actions, payment_record, session)
        await activate_campaign(campaign.id, session)
        trackable_actions = await create_trackable_actions(campaign, session)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        existing = await find_existing_campaign(payment.transaction_hash, intent.campaign_id, session)
        if existing is None:
            raise
        logger.info("Concurrent delivery already created campaign", extra=log_context)
        return existing

    await session.refresh(campaign)

    logger.info(
        "Campaign activated from payment",
        extra={
            **log_context,
            "brand_id": str(brand.id),
            "amount": payment.amount_minor_units,
            "trackable_actions": len(trackable_actions),
        },
    )
    return campaign
