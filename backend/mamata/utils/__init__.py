from mamata.utils.hashing import generate_hash, build_signature_message, sign_message, signatures_match
from mamata.utils.validators import validate_amount, validate_transaction_id, validate_idempotency_key, validate_origin

__all__ = [
    "generate_hash", "build_signature_message", "sign_message", "signatures_match",
    "validate_amount", "validate_transaction_id", "validate_idempotency_key", "validate_origin",
]
