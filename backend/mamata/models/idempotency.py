"""
Idempotency Record Model — Replays initiation responses for repeated keys.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, JSON

from mamata.database import Base


class IdempotencyRecord(Base):
    __tablename__ = "idempotency_keys"

    key = Column(String(128), primary_key=True)
    request_hash = Column(String(64), nullable=False)   # SHA-256 of the validated request

    status_code = Column(Integer, nullable=False)
    response = Column(JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
