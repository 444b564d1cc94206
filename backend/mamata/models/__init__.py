from mamata.models.idempotency import IdempotencyRecord

__all__ = ["IdempotencyRecord"]
