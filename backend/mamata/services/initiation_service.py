"""
Payment Initiation Service — The framework-free core of the initiation endpoint.

The FastAPI route and the serverless handler both call
``PaymentInitiationService.handle`` so status codes and bodies cannot differ
between deployment modes.
"""
import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from mamata.config import EsewaConfig, get_esewa_config
from mamata.exceptions import ClientInputError, MethodNotAllowedError, PaymentServiceError
from mamata.schemas.schemas import InitiationResponse, PaymentMethod, PaymentRequest
from mamata.services.esewa_service import EsewaService
from mamata.services.idempotency_service import IdempotencyService, get_idempotency_service
from mamata.utils.hashing import generate_hash
from mamata.utils.validators import validate_amount, validate_idempotency_key, validate_transaction_id

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("amount", "productName", "transactionId", "method")
SUPPORTED_METHODS = {m.value for m in PaymentMethod}
GENERIC_ERROR = "Internal server error"

Body = Union[bytes, str, dict, None]


@dataclass
class InitiationResult:
    status_code: int
    body: dict


def parse_payment_request(body: Body) -> PaymentRequest:
    """Parse and validate a raw initiation body into a PaymentRequest.

    Raises:
        ClientInputError: with the client-facing reason.
    """
    if body is None or body == b"" or body == "":
        data = {}
    elif isinstance(body, dict):
        data = body
    else:
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise ClientInputError("Invalid JSON body") from exc
    if not isinstance(data, dict):
        raise ClientInputError("Invalid JSON body")

    if any(data.get(name) in (None, "") for name in REQUIRED_FIELDS):
        raise ClientInputError("Missing required fields")

    for name in REQUIRED_FIELDS:
        value = data[name]
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ClientInputError("Invalid request fields")
        if name != "amount" and not isinstance(value, str):
            raise ClientInputError("Invalid request fields")

    if data["method"] not in SUPPORTED_METHODS:
        raise ClientInputError("Unsupported payment method")

    amount = str(data["amount"]).strip()
    if not validate_amount(amount):
        raise ClientInputError("Invalid amount")
    if not validate_transaction_id(data["transactionId"]):
        raise ClientInputError("Invalid transactionId")

    return PaymentRequest(
        amount=amount,
        product_name=data["productName"],
        transaction_id=data["transactionId"],
        method=data["method"],
    )


class PaymentInitiationService:
    """Validates an initiation request and returns the signed gateway form."""

    def __init__(
        self,
        config_provider: Callable[[], EsewaConfig] = get_esewa_config,
        idempotency: Optional[IdempotencyService] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._config_provider = config_provider
        self._idempotency = idempotency
        self._clock = clock

    def handle(self, http_method: str, body: Body, idempotency_key: Optional[str] = None) -> InitiationResult:
        """Run one initiation request end to end.

        Args:
            http_method: Request verb; anything but POST is rejected with 405.
            body: Raw JSON body (bytes/str) or an already-decoded dict.
            idempotency_key: Optional client-supplied replay key.

        Returns:
            InitiationResult with a JSON-serializable body.
        """
        try:
            if (http_method or "").upper() != "POST":
                raise MethodNotAllowedError()
            payment = parse_payment_request(body)
            if idempotency_key is not None and not validate_idempotency_key(idempotency_key):
                raise ClientInputError("Invalid Idempotency-Key")
        except (MethodNotAllowedError, ClientInputError) as exc:
            logger.info("Initiation rejected (%s): %s", exc.status_code, exc.message)
            return InitiationResult(exc.status_code, {"error": exc.message})

        try:
            return self._initiate(payment, idempotency_key)
        except PaymentServiceError as exc:
            if exc.status_code < 500:
                logger.info("Initiation rejected (%s): %s", exc.status_code, exc.message)
                return InitiationResult(exc.status_code, {"error": exc.message})
            logger.exception("Payment initiation failed for transaction %s", payment.transaction_id)
        except Exception:
            logger.exception("Unexpected error initiating payment for transaction %s", payment.transaction_id)
        return InitiationResult(500, {"error": GENERIC_ERROR})

    def _initiate(self, payment: PaymentRequest, idempotency_key: Optional[str]) -> InitiationResult:
        request_hash = generate_hash(payment.model_dump(mode="json"))
        use_store = self._idempotency is not None and idempotency_key is not None

        if use_store:
            cached = self._idempotency.lookup(idempotency_key, request_hash)
            if cached is not None:
                logger.info("Replaying initiation for idempotency key %s", idempotency_key)
                return InitiationResult(200, cached)

        esewa = EsewaService(self._config_provider(), clock=self._clock)
        built = esewa.build_payment(payment.amount, payment.transaction_id)
        response = InitiationResponse(
            success=True,
            paymentUrl=esewa.config.payment_url,
            formData=built.fields,
        ).model_dump()

        if use_store:
            self._idempotency.remember(idempotency_key, request_hash, 200, response)

        logger.info(
            "Payment initiated: method=%s product=%s transaction_uuid=%s amount=%s",
            payment.method.value, payment.product_name, built.transaction_uuid, payment.amount,
        )
        return InitiationResult(200, response)


def get_initiation_service() -> PaymentInitiationService:
    """FastAPI dependency / serverless factory for the initiation core."""
    return PaymentInitiationService(
        config_provider=get_esewa_config,
        idempotency=get_idempotency_service(),
    )
