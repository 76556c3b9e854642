"""Random credentials and resource-name suffixes."""

from __future__ import annotations

import secrets
import string

_ALNUM = string.ascii_letters + string.digits
_STRONG = _ALNUM + "!@#$%^&*"

# Suffixes guarantee the complexity rules regardless of the random part.
STRONG_SUFFIX = "1Aa!"
DB_SUFFIX = "1A"


def _random_string(charset: str, length: int) -> str:
    return "".join(secrets.choice(charset) for _ in range(length))


def generate_strong_password(length: int = 16) -> str:
    """Admin password with symbols, digits and mixed case."""
    return _random_string(_STRONG, length) + STRONG_SUFFIX


def generate_db_password(length: int = 24) -> str:
    """Alphanumeric-only password; the API returns 422 on most symbols in DB passwords."""
    return _random_string(_ALNUM, length) + DB_SUFFIX


def generate_id(length: int = 6) -> str:
    """Lowercase alphanumeric suffix for naming databases and users."""
    return _random_string(string.ascii_lowercase + string.digits, length)
