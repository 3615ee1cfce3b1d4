"""Exceptions raised by the persistence layer and its callers."""


class StoreError(Exception):
    """Base class for persistence failures."""


class StoreReadError(StoreError):
    """A query against the store failed."""


class StoreWriteError(StoreError):
    """An insert or update against the store failed. No partial write is left behind."""


class ValidationError(ValueError):
    """A required identifier or input was empty."""


def require(value: str, name: str) -> str:
    """Return value unchanged, or raise ValidationError if it is empty."""
    if not value or not value.strip():
        raise ValidationError(f"{name} is required")
    return value
