"""Order creation and payment verification against Razorpay."""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.billing.plans import PLANS
from flipdeck.billing.razorpay_client import (
    PaymentError,
    create_order,
    verify_payment_signature,
)
from flipdeck.models.subscription import Subscription
from flipdeck.models.user import User
from flipdeck.services.role_service import set_user_role

logger = logging.getLogger(__name__)

PAID_PLANS = {name for name, plan in PLANS.items() if plan.price > 0}


async def create_payment_order(
    db: AsyncSession,
    user: User,
    amount: Decimal,
    currency: str,
    plan_type: str,
) -> tuple[dict, Subscription]:
    """Create a gateway order and record it as a pending subscription.

    Not idempotent: a repeated call creates a second order and row.
    """
    if plan_type not in PAID_PLANS:
        raise PaymentError(f"Unknown plan type: {plan_type}")

    order = await create_order(amount, currency, str(user.id))

    subscription = Subscription(
        user_id=user.id,
        razorpay_order_id=order["id"],
        plan_type=plan_type,
        amount=amount,
        currency=currency,
        status="pending",
    )
    db.add(subscription)
    try:
        await db.flush()
    except SQLAlchemyError as e:
        logger.error("Could not record order %s for user %s: %s", order["id"], user.id, e)
        raise PaymentError("Failed to create subscription") from e
    return order, subscription


async def verify_payment(
    db: AsyncSession,
    user: User,
    payment_id: str,
    order_id: str,
    signature: str,
) -> Subscription:
    """Verify a checkout signature, activate the subscription and upgrade the role.

    Nothing is written unless the signature matches.
    """
    if not verify_payment_signature(order_id, payment_id, signature):
        logger.error("Signature verification failed for order %s (user %s)", order_id, user.id)
        raise PaymentError("Invalid payment signature")

    try:
        result = await db.execute(
            select(Subscription).where(
                Subscription.razorpay_order_id == order_id,
                Subscription.user_id == user.id,
            )
        )
        subscription = result.scalar_one_or_none()
        if subscription is None:
            logger.error("No subscription for order %s and user %s", order_id, user.id)
            raise PaymentError("Failed to update subscription")

        logger.info("Payment verified successfully for user %s", user.id)

        subscription.razorpay_payment_id = payment_id
        subscription.status = "active"
        subscription.started_at = datetime.now(timezone.utc).replace(tzinfo=None)
        await db.flush()

        await set_user_role(db, user.id, subscription.plan_type)
    except SQLAlchemyError as e:
        logger.error("Could not activate order %s for user %s: %s", order_id, user.id, e)
        raise PaymentError("Failed to update subscription") from e

    logger.info("User %s upgraded to %s", user.id, subscription.plan_type)
    return subscription
