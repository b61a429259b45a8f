"""Pydantic v2 schemas for plans, roles and the Razorpay payment functions."""

from decimal import Decimal

from pydantic import BaseModel, Field

# --- Request schemas ---


class CreateOrderRequest(BaseModel):
    """Body of ``create-razorpay-order``."""

    amount: Decimal = Field(..., gt=0)
    currency: str = Field("INR", min_length=3, max_length=3)
    plan_type: str = "pro"


class VerifyPaymentRequest(BaseModel):
    """Checkout receipt forwarded to ``verify-razorpay-payment``."""

    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str


# --- Response schemas ---


class CreateOrderResponse(BaseModel):
    order_id: str
    amount: int  # subunits, as returned by the gateway
    currency: str
    razorpay_key_id: str


class VerifyPaymentResponse(BaseModel):
    success: bool
    message: str


class PreflightResponse(BaseModel):
    """Which secrets are configured. Never their values."""

    has_razorpay_key_id: bool
    has_razorpay_key_secret: bool
    has_database_url: bool
    has_jwt_secret: bool


class PlanResponse(BaseModel):
    name: str
    display_name: str
    max_file_size_mb: int
    max_flipbooks: int | None
    price: int
    currency: str


class PlansListResponse(BaseModel):
    plans: list[PlanResponse]


class RoleResponse(BaseModel):
    role: str


class MyPlanResponse(BaseModel):
    """Caller's role, limits and current usage."""

    role: str
    plan: PlanResponse
    flipbooks_used: int
