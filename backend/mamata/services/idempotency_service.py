"""
Idempotency Service — Short-window replay of payment initiation responses.

A repeated ``Idempotency-Key`` with the same request returns the stored
response (same transaction_uuid, same signature) instead of minting a new
gateway attempt. The same key with a different request is a conflict.
"""
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Callable, Optional

from mamata.config import get_settings
from mamata.exceptions import IdempotencyConflictError
from mamata.models.idempotency import IdempotencyRecord


class IdempotencyService:
    """Stores and replays successful initiation responses per idempotency key."""

    def __init__(
        self,
        session_factory: Callable,
        window_seconds: int,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self._session_factory = session_factory
        self.window = timedelta(seconds=window_seconds)
        self._clock = clock

    def lookup(self, key: str, request_hash: str) -> Optional[dict]:
        """Return the stored response body for ``key``, if still inside the window.

        Raises:
            IdempotencyConflictError: if ``key`` was used for a different request.
        """
        with self._session_factory() as db:
            record = db.query(IdempotencyRecord).filter(IdempotencyRecord.key == key).first()
            if not record or record.created_at < self._clock() - self.window:
                return None
            if record.request_hash != request_hash:
                raise IdempotencyConflictError()
            return dict(record.response)

    def remember(self, key: str, request_hash: str, status_code: int, response: dict) -> None:
        """Store (or replace an expired) response for ``key``."""
        with self._session_factory() as db:
            db.merge(IdempotencyRecord(
                key=key,
                request_hash=request_hash,
                status_code=status_code,
                response=response,
                created_at=self._clock(),
            ))
            db.commit()

    def purge_expired(self) -> int:
        """Delete records older than the window. Returns the number removed."""
        with self._session_factory() as db:
            removed = (
                db.query(IdempotencyRecord)
                .filter(IdempotencyRecord.created_at < self._clock() - self.window)
                .delete(synchronize_session=False)
            )
            db.commit()
            return removed


@lru_cache()
def get_idempotency_service() -> Optional[IdempotencyService]:
    """Process-wide store, or None when IDEMPOTENCY_WINDOW_SECONDS is 0."""
    settings = get_settings()
    if settings.IDEMPOTENCY_WINDOW_SECONDS <= 0:
        return None

    from mamata.database import SessionLocal, init_db

    init_db()
    return IdempotencyService(SessionLocal, settings.IDEMPOTENCY_WINDOW_SECONDS)
