"""
Player identity — canonical compact and hyphenated forms of a player UUID.

Different Hypixel endpoints want different spellings of the same id:
``/v2/player`` takes the compact 32-character form, ``/v2/skyblock/profiles``
is called with the hyphenated 8-4-4-4-12 form, and profile member maps may be
keyed by either. ``normalize_identity`` derives both forms from whichever one
the caller has.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

_HEX32 = re.compile(r"^[0-9a-f]{32}$")

# 8-4-4-4-12 segment boundaries in the compact form
_SEGMENTS = ((0, 8), (8, 12), (12, 16), (16, 20), (20, 32))


class InvalidIdentity(ValueError):
    """Raised by strict normalization when an id is not 32 hex characters.

    Attributes:
        raw: The input that failed validation.
    """

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(
            f"Invalid player id '{raw}': expected 32 hexadecimal characters "
            "(hyphens optional)."
        )


class PlayerIdentity(BaseModel):
    """A player UUID in both canonical forms, lower-cased.

    Equality is on the compact form; since both forms are lower-cased at
    construction, comparison is effectively case-insensitive.

    Attributes:
        compact: 32 hex characters, no hyphens.
        hyphenated: 8-4-4-4-12 form. For invalid input this is a best-effort
            copy of the compact form.
        is_valid: ``False`` when the input was not 32 hex characters.
    """

    model_config = ConfigDict(frozen=True)

    compact: str
    hyphenated: str
    is_valid: bool = True

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PlayerIdentity):
            return self.compact == other.compact
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.compact)

    def __str__(self) -> str:
        return self.hyphenated


def compact_form(raw: str) -> str:
    """Strip hyphens and surrounding whitespace, lower-case."""
    return raw.strip().replace("-", "").lower()


def normalize_identity(raw: str, strict: bool = False) -> PlayerIdentity:
    """Canonicalize a player id into compact and hyphenated forms.

    Args:
        raw: Player UUID in hyphenated or compact form, any case.
        strict: Raise ``InvalidIdentity`` on malformed input instead of
            degrading.

    Returns:
        ``PlayerIdentity``. Malformed input (non-strict) yields
        ``is_valid=False`` with the compact form doubling as the hyphenated
        one, so lookups miss rather than abort.

    Raises:
        InvalidIdentity: Only when ``strict=True`` and the input is malformed.
    """
    compact = compact_form(raw or "")
    if not _HEX32.match(compact):
        if strict:
            raise InvalidIdentity(raw)
        return PlayerIdentity(compact=compact, hyphenated=compact, is_valid=False)

    hyphenated = "-".join(compact[start:end] for start, end in _SEGMENTS)
    return PlayerIdentity(compact=compact, hyphenated=hyphenated)
