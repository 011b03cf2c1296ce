"""Base SQLAlchemy model utilities."""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, String


def utcnow() -> datetime:
    """Naive UTC timestamp, the representation stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class IDMixin:
    id = Column(String(36), primary_key=True, default=new_id)
