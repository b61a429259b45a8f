"""Async Razorpay API wrapper and payment signature checks."""

import hashlib
import hmac
import logging
import time
from decimal import Decimal

import httpx

from flipdeck.config import settings

logger = logging.getLogger(__name__)

ORDER_FIELDS = ("id", "amount", "currency")


class PaymentError(Exception):
    """Payment flow failure; surfaced to callers as HTTP 400 ``{"error": ...}``."""


def get_razorpay_client() -> httpx.AsyncClient:
    """Create an HTTP client authenticated with the Razorpay key pair."""
    if not settings.razorpay_key_id or not settings.razorpay_key_secret:
        raise PaymentError("Razorpay credentials not configured")
    return httpx.AsyncClient(
        base_url=settings.razorpay_api_base,
        auth=httpx.BasicAuth(settings.razorpay_key_id, settings.razorpay_key_secret),
        timeout=settings.razorpay_timeout_seconds,
    )


def to_subunits(amount: Decimal | int) -> int:
    """Convert a major-unit amount (rupees) to subunits (paise)."""
    return int(Decimal(amount) * 100)


async def create_order(amount: Decimal | int, currency: str, user_id: str) -> dict:
    """Create a Razorpay order and return the gateway's order object."""
    payload = {
        "amount": to_subunits(amount),
        "currency": currency,
        "receipt": f"receipt_{user_id}_{int(time.time() * 1000)}",
    }
    logger.info("Creating Razorpay order for user %s (%s %s)", user_id, amount, currency)

    async with get_razorpay_client() as client:
        try:
            response = await client.post("/orders", json=payload)
        except httpx.HTTPError as e:
            logger.error("Razorpay order request failed: %s", e)
            raise PaymentError("Failed to create Razorpay order") from e

    if response.is_error:
        logger.error("Razorpay order creation failed: %s", response.text)
        raise PaymentError("Failed to create Razorpay order")

    try:
        order = response.json()
    except ValueError as e:
        logger.error("Razorpay returned a non-JSON order body: %s", response.text)
        raise PaymentError("Failed to create Razorpay order") from e

    if not isinstance(order, dict) or any(key not in order for key in ORDER_FIELDS):
        logger.error("Razorpay order response is missing fields: %s", response.text)
        raise PaymentError("Failed to create Razorpay order")

    logger.info("Created Razorpay order %s for user %s", order.get("id"), user_id)
    return order


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 hex digest over ``order_id|payment_id``."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """Check a checkout signature against the configured key secret."""
    if not settings.razorpay_key_secret:
        raise PaymentError("Razorpay secret not configured")
    expected = compute_signature(order_id, payment_id, settings.razorpay_key_secret)
    return hmac.compare_digest(expected.encode("utf-8"), (signature or "").encode("utf-8"))
