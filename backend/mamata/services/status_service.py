"""
eSewa Status Service — Confirms a transaction with the gateway's status-check API.
"""
import logging
from typing import Optional

import httpx

from mamata.exceptions import GatewayCallbackError

logger = logging.getLogger(__name__)


class EsewaStatusClient:
    """Thin synchronous client for the transaction status endpoint."""

    def __init__(self, status_url: str, timeout: float = 10.0, transport: Optional[httpx.BaseTransport] = None):
        self.status_url = status_url
        self.timeout = timeout
        self._transport = transport

    def fetch_status(self, product_code: str, total_amount: str, transaction_uuid: str) -> str:
        """Return the gateway's status string (COMPLETE, PENDING, CANCELED, ...).

        Raises:
            GatewayCallbackError: if the gateway cannot be reached or answers nonsense.
        """
        params = {
            "product_code": product_code,
            "total_amount": total_amount,
            "transaction_uuid": transaction_uuid,
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.get(self.status_url, params=params)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Status check failed for %s: %s", transaction_uuid, exc)
            raise GatewayCallbackError("Could not confirm payment status") from exc

        status = data.get("status") if isinstance(data, dict) else None
        if not isinstance(status, str):
            raise GatewayCallbackError("Could not confirm payment status")
        return status
