"""
Pydantic Schemas — Request & Response models for API validation.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


# ──────────────── Payment initiation ────────────────

class PaymentMethod(str, Enum):
    ESEWA = "esewa"


class PaymentRequest(BaseModel):
    """A validated checkout payment request (one per checkout attempt)."""

    model_config = ConfigDict(populate_by_name=True)

    amount: str = Field(..., description="Order total as a decimal string, e.g. 100.00")
    product_name: str = Field(..., alias="productName")
    transaction_id: str = Field(..., alias="transactionId", description="Order transaction id")
    method: PaymentMethod


class GatewayFormPayload(BaseModel):
    """Fields posted by the browser to the eSewa form endpoint."""

    amount: str
    tax_amount: str = "0"
    total_amount: str
    transaction_uuid: str
    product_code: str
    product_service_charge: str = "0"
    product_delivery_charge: str = "0"
    success_url: str
    failure_url: str
    signed_field_names: str
    signature: str


class InitiationResponse(BaseModel):
    success: bool
    paymentUrl: str
    formData: GatewayFormPayload


class ErrorResponse(BaseModel):
    error: str


# ──────────────── Callback ────────────────

class VerifiedPayment(BaseModel):
    """A success callback whose signature, merchant and status checked out."""

    transaction_uuid: str
    total_amount: str
    product_code: str
    status: str
    transaction_code: Optional[str] = None


# ──────────────── Checkout / pending order ────────────────

class CartItem(BaseModel):
    id: str
    name: str
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class ShippingDetails(BaseModel):
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zipCode: str = ""
    country: str = "Nepal"


class PendingOrder(BaseModel):
    """Cart + shipping snapshot the browser keeps across the gateway round-trip."""

    items: List[CartItem] = Field(..., min_length=1)
    shippingDetails: ShippingDetails
    amount: str
    transactionId: str
    createdAt: datetime = Field(default_factory=datetime.utcnow)


# ──────────────── Generic ────────────────

class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    esewa: str
    database: str
    uptime_seconds: float
