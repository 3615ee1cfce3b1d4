"""Stable per-install user identity, persisted to a local file."""

import random
import string
import time
from pathlib import Path

import structlog

logger = structlog.get_logger()

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_user_id() -> str:
    """user_<epoch millis>_<9 base-36 chars>."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"user_{int(time.time() * 1000)}_{suffix}"


def load_or_create_user_id(path: str | Path) -> str:
    """Return the id stored at path, writing a new one first if none exists.

    The id is opaque; nothing validates it beyond being non-empty.
    """
    path = Path(path).expanduser()
    if path.exists():
        stored = path.read_text().strip()
        if stored:
            return stored
    user_id = new_user_id()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(user_id + "\n")
    logger.info("identity.created", path=str(path))
    return user_id
