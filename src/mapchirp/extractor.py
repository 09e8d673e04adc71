"""Location extraction from a profile's about page.

The page layout is not under our control, so extraction is a fixed, ordered
list of independent strategies. Each strategy looks for one kind of marker and
returns a raw candidate; the first candidate that survives sanitization wins.
A strategy that raises (bad JSON, unexpected shapes) is skipped, never fatal.

Strategy order:
1. ``based_in``            "Based in: <value>" label text
2. ``location_attribute``  location attributes embedded in markup
3. ``country_region``      "Country/region: <value>" label text
4. ``json_location_field`` a quoted ``"location": "..."`` field anywhere
5. ``initial_state``       the ``window.__INITIAL_STATE__`` blob, walking
                           ``entities.users.entities.*.location``
"""

from __future__ import annotations

import html
import json
import logging
import re
from typing import TYPE_CHECKING, Any

from mapchirp.validation import sanitize_location

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# Label values run until the next tag, quote or line break.
_BASED_IN_RE = re.compile(r"Based in[:\s]+([^<\"'\n]+)", re.IGNORECASE)
_COUNTRY_REGION_RE = re.compile(r"Country/region[:\s]+([^<\"'\n]+)", re.IGNORECASE)

_LOCATION_ATTRIBUTE_RES = (
    re.compile(r"""data-location\s*=\s*["']([^"']*)["']""", re.IGNORECASE),
    re.compile(r"""itemprop\s*=\s*["'](?:homeLocation|location)["'][^>]*?content\s*=\s*["']([^"']*)["']""", re.IGNORECASE),
    re.compile(r"""data-testid\s*=\s*["']UserLocation["'][^>]*>\s*(?:<[^>]+>\s*)*([^<]+)""", re.IGNORECASE),
)

_JSON_LOCATION_RE = re.compile(r'"location"\s*:\s*"((?:[^"\\]|\\.)*)"')

_INITIAL_STATE_RE = re.compile(r"window\.__INITIAL_STATE__\s*=\s*")


def _based_in(content: str) -> str | None:
    match = _BASED_IN_RE.search(content)
    return match.group(1) if match else None


def _location_attribute(content: str) -> str | None:
    for pattern in _LOCATION_ATTRIBUTE_RES:
        match = pattern.search(content)
        if match:
            return html.unescape(match.group(1))
    return None


def _country_region(content: str) -> str | None:
    match = _COUNTRY_REGION_RE.search(content)
    return match.group(1) if match else None


def _json_location_field(content: str) -> str | None:
    match = _JSON_LOCATION_RE.search(content)
    if not match:
        return None
    return json.loads(f'"{match.group(1)}"')


def _initial_state(content: str) -> str | None:
    match = _INITIAL_STATE_RE.search(content)
    if not match:
        return None
    state, _end = json.JSONDecoder().raw_decode(content, match.end())
    users: Any = state["entities"]["users"]["entities"]
    if not isinstance(users, dict):
        return None
    for user in users.values():
        location = user.get("location") if isinstance(user, dict) else None
        if isinstance(location, str) and location.strip():
            return location
    return None


STRATEGIES: tuple[tuple[str, Callable[[str], str | None]], ...] = (
    ("based_in", _based_in),
    ("location_attribute", _location_attribute),
    ("country_region", _country_region),
    ("json_location_field", _json_location_field),
    ("initial_state", _initial_state),
)


def extract_with_strategy(content: object) -> tuple[str, str] | None:
    """Return ``(strategy_name, location)`` for the first accepted candidate."""
    if not isinstance(content, str) or not content:
        return None
    for name, strategy in STRATEGIES:
        try:
            candidate = strategy(content)
        except Exception as e:
            logger.debug("Extraction strategy %s failed: %s", name, e)
            continue
        location = sanitize_location(candidate)
        if location is not None:
            return name, location
        if candidate is not None:
            logger.debug("Extraction strategy %s rejected candidate %r", name, candidate)
    return None


def extract(content: object) -> str | None:
    """Extract a sanitized location from raw page content, or None."""
    found = extract_with_strategy(content)
    return found[1] if found else None
