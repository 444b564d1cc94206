"""
eSewa Callback Routes — Gateway success/failure redirects.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from mamata.services.callback_service import CallbackService, get_callback_service

router = APIRouter(prefix="/api/esewa", tags=["eSewa"])


@router.get("/payment/success")
def payment_success(
    data: Optional[str] = None,
    callbacks: CallbackService = Depends(get_callback_service),
):
    """Verify the gateway's success callback and send the browser to the confirmation page."""
    return RedirectResponse(callbacks.handle_success(data), status_code=302)


@router.get("/payment/failure")
def payment_failure(
    data: Optional[str] = None,
    callbacks: CallbackService = Depends(get_callback_service),
):
    """Send the browser to the payment-failed page."""
    return RedirectResponse(callbacks.handle_failure(data), status_code=302)
