"""
Member locator — find one player's record inside a profile's ``members`` map.

Member maps have been keyed by compact uuids for most of the API's life, but
hyphenated and mixed-case keys turn up in older payloads and in aggregator
mirrors. Lookup is exact first, then by normalized key.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from skyblock_stats.models.identity import PlayerIdentity, compact_form


def find_member(members: Any, identity: PlayerIdentity) -> Optional[Mapping[str, Any]]:
    """Return the member record for ``identity``, or ``None``.

    Args:
        members: A profile's ``members`` value (anything; non-mappings miss).
        identity: The player to look for.

    Returns:
        The first matching member mapping. Keys that collide after
        normalization are not disambiguated.
    """
    if not isinstance(members, Mapping):
        return None

    member = members.get(identity.compact)
    if isinstance(member, Mapping):
        return member

    for key, value in members.items():
        if isinstance(key, str) and compact_form(key) == identity.compact:
            return value if isinstance(value, Mapping) else None
    return None
