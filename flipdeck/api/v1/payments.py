"""Payment functions: Razorpay order creation, verification and preflight.

These routes keep the contract of standalone serverless functions: every
failure is an HTTP 400 with an ``{"error": ...}`` body (see the
``PaymentError`` handler in ``flipdeck.main``), and no state is shared
between invocations.
"""

import hmac
import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.api.deps import get_db
from flipdeck.auth.dependencies import InvalidCredentials, resolve_user
from flipdeck.billing.razorpay_client import PaymentError
from flipdeck.config import settings
from flipdeck.models.user import User
from flipdeck.schemas.billing import (
    CreateOrderRequest,
    CreateOrderResponse,
    PreflightResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from flipdeck.services.payment_service import create_payment_order, verify_payment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["payments"])


async def get_function_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Bearer auth that fails with the function's 400 ``{error}`` contract."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise PaymentError("No authorization header")

    token = auth_header.removeprefix("Bearer ").strip()
    try:
        return await resolve_user(db, token)
    except InvalidCredentials:
        raise PaymentError("Unauthorized") from None


@router.post("/create-razorpay-order", response_model=CreateOrderResponse)
async def create_razorpay_order(
    body: CreateOrderRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_function_user),
) -> CreateOrderResponse:
    """Create a gateway order and a pending subscription row."""
    order, _ = await create_payment_order(
        db,
        user,
        amount=body.amount,
        currency=body.currency,
        plan_type=body.plan_type,
    )
    logger.info("Order created successfully: %s", order["id"])
    return CreateOrderResponse(
        order_id=order["id"],
        amount=order["amount"],
        currency=order["currency"],
        razorpay_key_id=settings.razorpay_key_id,
    )


@router.post("/verify-razorpay-payment", response_model=VerifyPaymentResponse)
async def verify_razorpay_payment(
    body: VerifyPaymentRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_function_user),
) -> VerifyPaymentResponse:
    """Check the checkout signature; on success activate and upgrade to Pro."""
    await verify_payment(
        db,
        user,
        payment_id=body.razorpay_payment_id,
        order_id=body.razorpay_order_id,
        signature=body.razorpay_signature,
    )
    return VerifyPaymentResponse(
        success=True,
        message="Payment verified and user upgraded to Pro",
    )


@router.get("/razorpay-preflight", response_model=PreflightResponse)
async def razorpay_preflight(
    x_debug_token: str | None = Header(None),
) -> PreflightResponse | JSONResponse:
    """Report which secrets are configured. Requires the shared debug token."""
    expected = settings.debug_token
    provided = (x_debug_token or "").encode("utf-8")
    if not expected or not provided or not hmac.compare_digest(provided, expected.encode("utf-8")):
        return JSONResponse(status_code=403, content={"error": "Forbidden"})

    return PreflightResponse(
        has_razorpay_key_id=bool(settings.razorpay_key_id),
        has_razorpay_key_secret=bool(settings.razorpay_key_secret),
        has_database_url=bool(settings.database_url),
        has_jwt_secret=bool(settings.jwt_secret_key),
    )
