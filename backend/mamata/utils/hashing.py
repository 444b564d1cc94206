"""
Cryptographic Hashing Utilities — HMAC-SHA256 gateway signatures and
SHA-256 request fingerprints.
"""
import base64
import hashlib
import hmac
import json
from typing import Iterable, Mapping

from mamata.exceptions import ConfigurationError, SigningError


def generate_hash(data: dict) -> str:
    """Generate a SHA-256 hash of a dictionary (deterministic, sorted keys)."""
    canonical = json.dumps(data, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(canonical).hexdigest()


def build_signature_message(field_names: Iterable[str], values: Mapping[str, str]) -> str:
    """Join the named fields as ``key=value`` pairs, comma-separated, in the given order.

    >>> build_signature_message(["a", "b"], {"a": "1", "b": "2"})
    'a=1,b=2'
    """
    return ",".join(f"{name}={values[name]}" for name in field_names)


def sign_message(secret_key: str, message: str) -> str:
    """Compute the Base64-encoded HMAC-SHA256 of ``message`` under ``secret_key``.

    Output matches the gateway's own verification routine byte for byte.

    Raises:
        ConfigurationError: if the secret key is empty.
        SigningError: on any other failure while signing.
    """
    if not secret_key:
        raise ConfigurationError("Signing secret key is not configured")
    try:
        digest = hmac.new(
            secret_key.encode("utf-8"),
            message.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        return base64.b64encode(digest).decode("ascii")
    except (AttributeError, TypeError, UnicodeError) as exc:
        raise SigningError("Could not sign payment request") from exc


def signatures_match(expected: str, received: str) -> bool:
    """Constant-time comparison of two Base64 signatures."""
    return hmac.compare_digest(expected.encode("ascii", "ignore"), received.encode("ascii", "ignore"))
