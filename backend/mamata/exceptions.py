"""
PAYMENT SERVICE ERRORS

Centralized domain errors for the eSewa payment workflow.
Every error carries a short message that is safe to show to a client.
"""


class PaymentServiceError(Exception):
    """Base exception for all payment workflow failures."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ClientInputError(PaymentServiceError):
    """Raised when request fields are missing, malformed or unsupported."""

    status_code = 400


class MethodNotAllowedError(PaymentServiceError):
    """Raised when the initiation endpoint is called with a verb other than POST."""

    status_code = 405

    def __init__(self, message: str = "Method not allowed"):
        super().__init__(message)


class ConfigurationError(PaymentServiceError):
    """Raised when the merchant code or secret key is missing."""


class SigningError(PaymentServiceError):
    """Raised on an unexpected failure while computing a signature."""


class GatewayCallbackError(PaymentServiceError):
    """Raised when a gateway callback is malformed or cannot be verified."""

    status_code = 400


class IdempotencyConflictError(PaymentServiceError):
    """Raised when an idempotency key is replayed with a different request."""

    status_code = 409

    def __init__(self, message: str = "Idempotency key reused with a different request"):
        super().__init__(message)


class PaymentInitiationFailed(PaymentServiceError):
    """Raised by the redirect driver when the initiation call does not succeed."""

    status_code = 502

    def __init__(self, message: str = "Failed to initiate payment. Please try again."):
        super().__init__(message)
