"""
Checkout Service — Client redirect driver for the eSewa hand-off.

Calls the initiation endpoint, then renders a page that caches the pending
order in the browser and POSTs the signed fields to the gateway as a real
form navigation.
"""
import json
import logging
import uuid
from decimal import Decimal
from typing import List, Optional

import httpx
from pydantic import ValidationError

from mamata.config import get_settings
from mamata.exceptions import ClientInputError, PaymentInitiationFailed
from mamata.schemas.schemas import (
    CartItem, InitiationResponse, PaymentMethod, PaymentRequest, PendingOrder, ShippingDetails,
)
from mamata.utils.pages import render_redirect_page
from mamata.utils.validators import validate_transaction_id

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
MOCK_PAYMENT_URL = "https://rc-epay.esewa.com.np/api/epay/main/v2/form"


def parse_cart(raw: str) -> List[CartItem]:
    """Decode the checkout form's JSON cart.

    Raises:
        ClientInputError: if the cart is not a non-empty list of valid items.
    """
    try:
        items = json.loads(raw)
    except ValueError as exc:
        raise ClientInputError("Your cart could not be read") from exc
    if not isinstance(items, list) or not items:
        raise ClientInputError("Your cart is empty")
    try:
        return [CartItem.model_validate(item) for item in items]
    except ValidationError as exc:
        raise ClientInputError("Your cart could not be read") from exc


def cart_total(items: List[CartItem]) -> str:
    """Sum of price x quantity, formatted to two decimals."""
    total = sum((item.price * item.quantity for item in items), Decimal("0"))
    return str(total.quantize(TWOPLACES))


def build_pending_order(
    items: List[CartItem],
    shipping: ShippingDetails,
    transaction_id: Optional[str] = None,
) -> PendingOrder:
    """Snapshot the cart and shipping form before leaving for the gateway."""
    transaction_id = transaction_id or str(uuid.uuid4())
    if not validate_transaction_id(transaction_id):
        raise ClientInputError("Invalid transactionId")
    return PendingOrder(
        items=items,
        shippingDetails=shipping,
        amount=cart_total(items),
        transactionId=transaction_id,
    )


def mock_initiation_transport() -> httpx.MockTransport:
    """Development stand-in for the initiation endpoint (same response shape)."""

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content or b"{}")
        amount = str(payload.get("amount", "0"))
        origin = get_settings().site_origin
        return httpx.Response(200, json={
            "success": True,
            "paymentUrl": MOCK_PAYMENT_URL,
            "formData": {
                "amount": amount,
                "tax_amount": "0",
                "total_amount": amount,
                "transaction_uuid": f"mock-{payload.get('transactionId', 'uuid')}",
                "product_code": "EPAYTEST",
                "product_service_charge": "0",
                "product_delivery_charge": "0",
                "success_url": f"{origin}/api/esewa/payment/success",
                "failure_url": f"{origin}/api/esewa/payment/failure",
                "signed_field_names": "total_amount,transaction_uuid,product_code",
                "signature": "mock-signature",
            },
        })

    return httpx.MockTransport(handler)


class RedirectDriver:
    """Requests a signed gateway form and renders the auto-submitting hand-off page."""

    def __init__(self, endpoint_url: str, timeout: float = 10.0, transport: Optional[httpx.BaseTransport] = None):
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._transport = transport

    def request_payment(self, payment: PaymentRequest) -> InitiationResponse:
        """POST the payment request to the initiation endpoint.

        Raises:
            PaymentInitiationFailed: on network errors, non-200 responses, or a
                body that is not a successful initiation response.
        """
        body = payment.model_dump(by_alias=True, mode="json")
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(self.endpoint_url, json=body)
        except httpx.HTTPError as exc:
            logger.error("Error initiating eSewa payment: %s", exc)
            raise PaymentInitiationFailed() from exc

        if resp.status_code != 200:
            logger.error("Initiation endpoint answered %s for %s", resp.status_code, payment.transaction_id)
            raise PaymentInitiationFailed()
        try:
            data = InitiationResponse.model_validate(resp.json())
        except ValueError as exc:
            logger.error("Initiation endpoint returned an unreadable body for %s", payment.transaction_id)
            raise PaymentInitiationFailed() from exc
        if not data.success:
            raise PaymentInitiationFailed()
        return data

    def start(self, pending_order: PendingOrder, product_name: str = "MAMATA") -> str:
        """Initiate payment for ``pending_order`` and return the hand-off page HTML."""
        payment = PaymentRequest(
            amount=pending_order.amount,
            product_name=product_name,
            transaction_id=pending_order.transactionId,
            method=PaymentMethod.ESEWA,
        )
        response = self.request_payment(payment)
        return render_redirect_page(
            response.paymentUrl,
            response.formData.model_dump(),
            pending_order.model_dump(mode="json"),
        )


def get_redirect_driver() -> RedirectDriver:
    """FastAPI dependency for the checkout route."""
    settings = get_settings()
    transport = mock_initiation_transport() if settings.PAYMENT_MOCK_MODE else None
    return RedirectDriver(settings.initiation_url, settings.INITIATION_TIMEOUT_SECONDS, transport=transport)
