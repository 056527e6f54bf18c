from datetime import datetime, timezone


def naive_utc(value: datetime | None) -> datetime | None:
    """Timestamps are stored as naive UTC; convert aware input before it reaches the model."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
