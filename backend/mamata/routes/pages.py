"""
Result Pages — Order confirmation and payment failure landing pages.
"""
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from mamata.utils.pages import templates

router = APIRouter(tags=["Pages"])


@router.get("/order-confirmation", response_class=HTMLResponse)
def order_confirmation(request: Request, transaction_uuid: str = "", amount: str = ""):
    """Order confirmation; consumes the pending order."""
    return templates.TemplateResponse(
        request, "confirmation.html", {"transaction_uuid": transaction_uuid, "amount": amount},
    )


@router.get("/payment-failed", response_class=HTMLResponse)
def payment_failed(request: Request, error: str = "", transaction_uuid: str = ""):
    """Payment failed; the pending order stays so checkout can retry."""
    return templates.TemplateResponse(
        request, "failure.html", {"error": error, "transaction_uuid": transaction_uuid},
    )
