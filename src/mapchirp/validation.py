"""Username validation and location sanitization.

Every location that reaches the cache passes through ``sanitize_location``,
whether it was scraped from a profile page or observed directly on the page.
"""

from __future__ import annotations

import re

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{1,15}$")

MAX_LOCATION_LENGTH = 100

PLACEHOLDER_LOCATIONS = frozenset({"null", "undefined", "n/a", "none", "unknown", "-"})


def is_valid_username(username: object) -> bool:
    """True for 1-15 characters of ASCII letters, digits and underscore."""
    if not isinstance(username, str):
        return False
    return USERNAME_PATTERN.fullmatch(username) is not None


def sanitize_location(candidate: object) -> str | None:
    """Return the trimmed location, or None if it should not be stored.

    Rejects non-strings, empty values, values longer than
    ``MAX_LOCATION_LENGTH`` and known placeholders (case-insensitive).
    """
    if not isinstance(candidate, str):
        return None
    location = candidate.strip()
    if not location or len(location) > MAX_LOCATION_LENGTH:
        return None
    if location.lower() in PLACEHOLDER_LOCATIONS:
        return None
    return location
