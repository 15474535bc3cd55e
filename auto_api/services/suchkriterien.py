"""
Search criteria ("Suchkriterien") accepted by the auto search.

A criteria mapping is a flat dict of string keys to primitive values, e.g.
``{"modell": "a", "preis": "40000", "gelaende": "true"}``.
"""
import logging
from typing import Any, Iterable, Mapping

from auto_api.models.auto import AutoArt

logger = logging.getLogger(__name__)

Suchkriterien = Mapping[str, Any]

# Auto attributes compared for equality
EQUALITY_KEYS = frozenset({"id", "version", "fgnr", "art", "rabatt", "lieferbar", "datum"})

# Keys with their own predicate (substring on Modell, price ceiling)
SPECIAL_KEYS = frozenset({"modell", "preis"})

# Tag-search shortcuts, active when the value is "true"
TAG_FLAGS = frozenset({"sport", "komfort", "gelaende", "python"})

VALID_KEYS = EQUALITY_KEYS | SPECIAL_KEYS | TAG_FLAGS

VALID_ARTEN = frozenset(a.value for a in AutoArt)


def check_keys(keys: Iterable[str]) -> bool:
    valid = True
    for key in keys:
        if key not in VALID_KEYS:
            logger.debug(f"check_keys: invalid search key '{key}'")
            valid = False
    return valid


def check_enums(suchkriterien: Suchkriterien) -> bool:
    art = suchkriterien.get("art")
    logger.debug(f"check_enums: art={art}")
    if art is None:
        return True
    if isinstance(art, AutoArt):
        return True
    return art in VALID_ARTEN


def validate(suchkriterien: Suchkriterien) -> bool:
    """True if every key is known and ``art`` (if given) is a legal body type."""
    return check_keys(suchkriterien.keys()) and check_enums(suchkriterien)
