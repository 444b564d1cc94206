"""
Validators — Rule-based checks for payment request fields.
"""
import re
from decimal import Decimal, InvalidOperation
from urllib.parse import urlparse

AMOUNT_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?")
TRANSACTION_ID_PATTERN = re.compile(r"[A-Za-z0-9-]{1,64}")
IDEMPOTENCY_KEY_PATTERN = re.compile(r"[A-Za-z0-9_.:-]{1,128}")


def validate_amount(amount: str | None) -> bool:
    """Validate a payment amount: plain positive ASCII decimal such as ``100`` or ``100.00``."""
    if not amount or not AMOUNT_PATTERN.fullmatch(amount):
        return False
    try:
        return Decimal(amount) > 0
    except InvalidOperation:
        return False


def validate_transaction_id(transaction_id: str | None) -> bool:
    """Validate a transaction id: 1-64 letters, digits or hyphens (gateway's allowed charset)."""
    if not transaction_id:
        return False
    return bool(TRANSACTION_ID_PATTERN.fullmatch(transaction_id))


def validate_idempotency_key(key: str | None) -> bool:
    """Validate an Idempotency-Key header value."""
    if not key:
        return False
    return bool(IDEMPOTENCY_KEY_PATTERN.fullmatch(key))


def validate_origin(url: str | None) -> bool:
    """Validate that a URL has both a scheme and a host."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
