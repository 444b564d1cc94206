"""
eSewa Service — Signed payment-request builder and callback verifier.

The signature contract is fixed by the gateway: HMAC-SHA256 over
``total_amount=<a>,transaction_uuid=<u>,product_code=<c>``, Base64 encoded.
Both directions (outbound request, inbound success callback) go through
``build_signature_message`` and ``sign_message`` so they cannot drift apart.
"""
import base64
import binascii
import json
import time
from dataclasses import dataclass
from typing import Callable, Optional

from mamata.config import EsewaConfig
from mamata.exceptions import GatewayCallbackError
from mamata.schemas.schemas import GatewayFormPayload, VerifiedPayment
from mamata.utils.hashing import build_signature_message, sign_message, signatures_match

SIGNED_FIELDS = ("total_amount", "transaction_uuid", "product_code")
SIGNED_FIELD_NAMES = ",".join(SIGNED_FIELDS)

# Fields a success callback must have signed before we rely on them
REQUIRED_CALLBACK_FIELDS = ("transaction_uuid", "total_amount", "product_code", "status")

COMPLETE = "COMPLETE"


@dataclass(frozen=True)
class EsewaPaymentRequest:
    """Output of the request builder: the uuid, the signed message and the form fields."""

    transaction_uuid: str
    message: str
    fields: GatewayFormPayload


def _callback_text(value) -> str:
    """Render a decoded callback value the way it appeared in the gateway's JSON."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class EsewaService:
    """Builds signed gateway requests and verifies gateway callbacks."""

    def __init__(self, config: EsewaConfig, clock: Callable[[], float] = time.time):
        self.config = config
        self._clock = clock

    def make_transaction_uuid(self, transaction_id: str) -> str:
        """``<epoch milliseconds>-<caller transaction id>``."""
        return f"{int(self._clock() * 1000)}-{transaction_id}"

    def build_payment(self, amount: str, transaction_id: str) -> EsewaPaymentRequest:
        """Assemble the signed form payload for one payment attempt.

        Args:
            amount: Order total exactly as it should be signed and displayed.
            transaction_id: Caller's order transaction id; embedded in the uuid.

        Returns:
            EsewaPaymentRequest whose signature covers exactly ``message``.
        """
        transaction_uuid = self.make_transaction_uuid(transaction_id)
        signed_values = {
            "total_amount": amount,
            "transaction_uuid": transaction_uuid,
            "product_code": self.config.merchant_code,
        }
        message = build_signature_message(SIGNED_FIELDS, signed_values)
        signature = sign_message(self.config.secret_key, message)

        fields = GatewayFormPayload(
            amount=amount,
            tax_amount="0",
            total_amount=amount,
            transaction_uuid=transaction_uuid,
            product_code=self.config.merchant_code,
            product_service_charge="0",
            product_delivery_charge="0",
            success_url=self.config.success_url,
            failure_url=self.config.failure_url,
            signed_field_names=SIGNED_FIELD_NAMES,
            signature=signature,
        )
        return EsewaPaymentRequest(transaction_uuid=transaction_uuid, message=message, fields=fields)

    @staticmethod
    def decode_callback(data: Optional[str]) -> dict:
        """Decode the Base64 JSON ``data`` parameter the gateway appends to callbacks.

        Numbers keep their JSON text so signatures can be recomputed.
        """
        if not data:
            raise GatewayCallbackError("Missing callback data")

        # '+' arrives as ' ' when the gateway does not percent-encode the query
        cleaned = data.strip().replace(" ", "+")
        cleaned += "=" * (-len(cleaned) % 4)
        try:
            raw = base64.b64decode(cleaned)
            payload = json.loads(raw.decode("utf-8"), parse_float=str, parse_int=str)
        except (binascii.Error, ValueError) as exc:
            raise GatewayCallbackError("Malformed callback data") from exc

        if not isinstance(payload, dict):
            raise GatewayCallbackError("Malformed callback data")
        return payload

    def verify_callback(self, data: Optional[str]) -> VerifiedPayment:
        """Verify a success callback and return the confirmed payment.

        Raises:
            GatewayCallbackError: if the payload is malformed, unsigned, signed
                under another key, for another merchant, or not COMPLETE.
        """
        payload = self.decode_callback(data)

        signed_field_names = payload.get("signed_field_names")
        received_signature = payload.get("signature")
        if not isinstance(signed_field_names, str) or not isinstance(received_signature, str):
            raise GatewayCallbackError("Callback is not signed")

        names = [name.strip() for name in signed_field_names.split(",") if name.strip()]
        if any(name not in payload for name in names):
            raise GatewayCallbackError("Callback is missing signed fields")
        if any(name not in names for name in REQUIRED_CALLBACK_FIELDS):
            raise GatewayCallbackError("Callback does not sign the required fields")

        values = {name: _callback_text(payload[name]) for name in names}
        expected = sign_message(self.config.secret_key, build_signature_message(names, values))
        if not signatures_match(expected, received_signature):
            raise GatewayCallbackError("Callback signature mismatch")

        if values["product_code"] != self.config.merchant_code:
            raise GatewayCallbackError("Callback is for a different merchant")

        status = values["status"]
        if status != COMPLETE:
            raise GatewayCallbackError(f"Payment status is {status}")

        transaction_code = payload.get("transaction_code")
        return VerifiedPayment(
            transaction_uuid=values["transaction_uuid"],
            total_amount=values["total_amount"],
            product_code=values["product_code"],
            status=status,
            transaction_code=_callback_text(transaction_code) if transaction_code is not None else None,
        )
