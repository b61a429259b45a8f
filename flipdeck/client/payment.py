"""Payment workflow — order, hosted checkout, verification."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from flipdeck.billing.plans import PLANS
from flipdeck.client.api import FlipdeckAPIError, FlipdeckClient

logger = logging.getLogger(__name__)

CHECKOUT_NAME = "FlipDeck"
CHECKOUT_DESCRIPTION = "Pro Plan - Unlimited Flipbooks"


class PaymentFailed(Exception):
    """Any phase of the upgrade failed. No automatic retry."""


@dataclass(frozen=True)
class CheckoutOptions:
    """What the hosted checkout overlay is opened with."""

    key: str
    amount: int
    currency: str
    order_id: str
    name: str = CHECKOUT_NAME
    description: str = CHECKOUT_DESCRIPTION
    prefill: dict[str, str] = field(default_factory=dict)


# Opens the overlay; resolves to the gateway's receipt
# ({razorpay_payment_id, razorpay_order_id, razorpay_signature}) or None if dismissed.
CheckoutHandler = Callable[[CheckoutOptions], Awaitable[dict | None]]


async def upgrade_to_pro(
    client: FlipdeckClient,
    checkout: CheckoutHandler,
    plan_type: str = "pro",
) -> dict:
    """Run the full upgrade handshake and return the verification result."""
    plan = PLANS[plan_type]

    try:
        user = await client.get_me()
        order = await client.create_order(plan.price, plan.currency, plan_type)
    except FlipdeckAPIError as e:
        raise PaymentFailed(e.message or "Failed to initiate payment") from e

    options = CheckoutOptions(
        key=order["razorpay_key_id"],
        amount=order["amount"],
        currency=order["currency"],
        order_id=order["order_id"],
        prefill={"email": user.get("email", "")},
    )
    receipt = await checkout(options)
    if receipt is None:
        logger.info("Checkout dismissed for order %s", order["order_id"])
        raise PaymentFailed("Payment cancelled")

    try:
        result = await client.verify_payment(
            razorpay_payment_id=receipt["razorpay_payment_id"],
            razorpay_order_id=receipt["razorpay_order_id"],
            razorpay_signature=receipt["razorpay_signature"],
        )
    except FlipdeckAPIError as e:
        raise PaymentFailed(e.message or "Payment verification failed") from e

    logger.info("Payment successful for order %s", order["order_id"])
    return result
