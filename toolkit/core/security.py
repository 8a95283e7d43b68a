"""Random identifiers drawn from a cryptographically secure source."""

from __future__ import annotations

import secrets
import string

RANDOM_STRING_SOURCE = string.ascii_lowercase + string.ascii_uppercase + string.digits


def random_string(n: int) -> str:
    """Return n characters picked uniformly from RANDOM_STRING_SOURCE."""
    if n < 0:
        raise ValueError("random string length must not be negative")
    return "".join(secrets.choice(RANDOM_STRING_SOURCE) for _ in range(n))
