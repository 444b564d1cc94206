from mamata.services.esewa_service import EsewaService
from mamata.services.initiation_service import PaymentInitiationService
from mamata.services.callback_service import CallbackService
from mamata.services.checkout_service import RedirectDriver
from mamata.services.idempotency_service import IdempotencyService
from mamata.services.status_service import EsewaStatusClient

__all__ = [
    "EsewaService", "PaymentInitiationService", "CallbackService",
    "RedirectDriver", "IdempotencyService", "EsewaStatusClient",
]
