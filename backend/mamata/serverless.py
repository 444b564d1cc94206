"""
Serverless Adapter — Netlify / AWS Lambda proxy handler for payment initiation.

Deploy with ``mamata.serverless.handler`` as the function entry point. The
contract is identical to ``POST /api/initiate-payment``; a missing secret key
surfaces as a 500 on first use.
"""
import base64
import binascii
import json
import logging
from functools import lru_cache

from mamata.config import get_settings
from mamata.logging_config import configure_logging
from mamata.services.initiation_service import (
    GENERIC_ERROR, InitiationResult, PaymentInitiationService, get_initiation_service,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


@lru_cache()
def _service() -> PaymentInitiationService:
    """Built once per cold start."""
    configure_logging(get_settings())
    return get_initiation_service()


def _to_response(result: InitiationResult) -> dict:
    return {
        "statusCode": result.status_code,
        "headers": dict(JSON_HEADERS),
        "body": json.dumps(result.body),
    }


def handler(event: dict, context=None) -> dict:
    """Lambda-proxy style entry point: ``event`` carries httpMethod, headers, body."""
    event = event or {}
    headers = {str(k).lower(): v for k, v in (event.get("headers") or {}).items()}

    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body)
        except (binascii.Error, ValueError):
            logger.info("Rejected initiation with undecodable base64 body")
            return _to_response(InitiationResult(400, {"error": "Invalid JSON body"}))

    try:
        service = _service()
    except Exception:
        logger.exception("Payment initiation service could not start")
        return _to_response(InitiationResult(500, {"error": GENERIC_ERROR}))

    result = service.handle(
        event.get("httpMethod", ""),
        body,
        headers.get("idempotency-key"),
    )
    return _to_response(result)
