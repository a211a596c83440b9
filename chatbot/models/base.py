"""Column helpers shared by the ORM models."""

import uuid
from datetime import UTC, datetime


def new_id() -> str:
    """Generate an opaque identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time with microsecond precision (sortable)."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
