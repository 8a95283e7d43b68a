"""Slug normalization."""
from __future__ import annotations

import re

from toolkit.core.errors import EmptySlugInputError, EmptySlugResultError

SLUG_SEPARATOR_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str | None) -> str:
    """
    Lower-case value and collapse every run outside [a-z0-9] into one hyphen.

    Non-Latin letters are not transliterated, so text written only in another
    script has nothing left and raises EmptySlugResultError.
    """
    if not value:
        raise EmptySlugInputError()
    slug = SLUG_SEPARATOR_PATTERN.sub("-", value.lower()).strip("-")
    if not slug:
        raise EmptySlugResultError()
    return slug
