import secrets
from datetime import datetime, timezone


def generate_secret_key(length: int = 32) -> str:
    """Generate a random, URL-safe secret key."""
    return secrets.token_urlsafe(length)


def utcnow() -> datetime:
    """Timezone-aware UTC now; every stored timestamp goes through this."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Mongo hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
