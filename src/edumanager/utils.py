from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def clean(value: str | None) -> str:
    """Strip surrounding whitespace, treating None as an empty string."""
    return value.strip() if value else ""
