"""
Callback Service — Turns gateway success/failure callbacks into redirects.

Every outcome ends in a redirect URL; errors are logged and relayed to the
payment-failed page, never raised to the browser.
"""
import logging
from typing import Callable, Optional
from urllib.parse import urlencode

from mamata.config import EsewaConfig, get_esewa_config, get_settings
from mamata.exceptions import GatewayCallbackError
from mamata.services.esewa_service import COMPLETE, EsewaService
from mamata.services.status_service import EsewaStatusClient
from mamata.utils.validators import validate_origin

logger = logging.getLogger(__name__)

CONFIRMATION_PATH = "/order-confirmation"
FAILURE_PATH = "/payment-failed"

VERIFICATION_FAILED = "Payment could not be verified"
PAYMENT_FAILED = "Payment was cancelled or could not be completed"


class CallbackService:
    """Verifies callbacks and picks the internal page the browser should land on."""

    def __init__(
        self,
        frontend_origin: str,
        fallback_origin: str,
        config_provider: Callable[[], EsewaConfig] = get_esewa_config,
        status_client: Optional[EsewaStatusClient] = None,
    ):
        if validate_origin(frontend_origin):
            self.frontend_origin = frontend_origin.rstrip("/")
        else:
            logger.warning("Invalid FRONTEND_URL detected, using PUBLIC_SITE_URL")
            self.frontend_origin = fallback_origin.rstrip("/")
        self._config_provider = config_provider
        self._status_client = status_client

    def confirmation_url(self, **params: str) -> str:
        return f"{self.frontend_origin}{CONFIRMATION_PATH}?{urlencode(params)}"

    def failure_url(self, error: str, transaction_uuid: Optional[str] = None) -> str:
        params = {"error": error}
        if transaction_uuid:
            params["transaction_uuid"] = transaction_uuid
        return f"{self.frontend_origin}{FAILURE_PATH}?{urlencode(params)}"

    def handle_success(self, data: Optional[str]) -> str:
        """Verify a success callback; return the confirmation or failure URL."""
        try:
            esewa = EsewaService(self._config_provider())
            payment = esewa.verify_callback(data)
            if self._status_client is not None:
                status = self._status_client.fetch_status(
                    payment.product_code, payment.total_amount, payment.transaction_uuid,
                )
                if status != COMPLETE:
                    raise GatewayCallbackError(f"Payment status is {status}")
        except GatewayCallbackError as exc:
            logger.warning("Rejected eSewa success callback: %s", exc.message)
            return self.failure_url(exc.message)
        except Exception:
            logger.exception("Could not verify eSewa success callback")
            return self.failure_url(VERIFICATION_FAILED)

        logger.info(
            "Payment successful for transaction %s, amount %s",
            payment.transaction_uuid, payment.total_amount,
        )
        params = {"transaction_uuid": payment.transaction_uuid, "amount": payment.total_amount}
        if payment.transaction_code:
            params["transaction_code"] = payment.transaction_code
        return self.confirmation_url(**params)

    def handle_failure(self, data: Optional[str] = None) -> str:
        """Relay a failure/cancel callback to the payment-failed page.

        Any ``data`` the gateway sent is read only to show the transaction id.
        """
        transaction_uuid = None
        if data:
            try:
                value = EsewaService.decode_callback(data).get("transaction_uuid")
                transaction_uuid = value if isinstance(value, str) else None
            except GatewayCallbackError:
                logger.info("Ignoring unreadable data on eSewa failure callback")
        logger.info("Payment failed for transaction %s", transaction_uuid or "<unknown>")
        return self.failure_url(PAYMENT_FAILED, transaction_uuid)


def get_callback_service() -> CallbackService:
    """FastAPI dependency for the callback routes."""
    settings = get_settings()
    status_client = None
    if settings.ESEWA_VERIFY_STATUS:
        status_client = EsewaStatusClient(settings.ESEWA_STATUS_URL, settings.ESEWA_STATUS_TIMEOUT_SECONDS)
    return CallbackService(
        frontend_origin=settings.frontend_origin,
        fallback_origin=settings.site_origin,
        status_client=status_client,
    )
