"""
Checkout Routes — Browser hand-off to the eSewa payment form.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from mamata.exceptions import ClientInputError, PaymentInitiationFailed, PaymentServiceError
from mamata.schemas.schemas import ShippingDetails
from mamata.services.checkout_service import RedirectDriver, build_pending_order, get_redirect_driver, parse_cart
from mamata.utils.pages import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["Checkout"])


def _error_page(request: Request, exc: PaymentServiceError) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "checkout_error.html",
        {"message": exc.message, "retry_url": "/checkout"},
        status_code=exc.status_code,
    )


@router.post("/esewa", response_class=HTMLResponse)
def checkout_esewa(
    request: Request,
    cart: str = Form(...),
    product_name: str = Form("MAMATA"),
    transaction_id: Optional[str] = Form(None),
    first_name: str = Form(""),
    last_name: str = Form(""),
    email: str = Form(""),
    address: str = Form(""),
    city: str = Form(""),
    state: str = Form(""),
    zip_code: str = Form(""),
    country: str = Form("Nepal"),
    driver: RedirectDriver = Depends(get_redirect_driver),
):
    """Start an eSewa payment for the submitted cart and hand the browser to the gateway."""
    shipping = ShippingDetails(
        firstName=first_name, lastName=last_name, email=email, address=address,
        city=city, state=state, zipCode=zip_code, country=country,
    )
    try:
        pending_order = build_pending_order(parse_cart(cart), shipping, transaction_id)
    except ClientInputError as exc:
        return _error_page(request, exc)

    try:
        page = driver.start(pending_order, product_name=product_name or "MAMATA")
    except PaymentInitiationFailed as exc:
        return _error_page(request, exc)

    logger.info("Handing transaction %s to eSewa", pending_order.transactionId)
    return HTMLResponse(page)
