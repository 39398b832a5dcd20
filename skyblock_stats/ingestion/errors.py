"""
Upstream failure types shared by the source clients.

Clients raise these; the level table provider and the fallback client absorb
them, and the orchestrator turns whatever reaches it into an explicit
``None`` result. Malformed player ids are handled separately by
``skyblock_stats.models.identity.InvalidIdentity``.
"""

from __future__ import annotations

from typing import Optional


class UpstreamUnavailable(RuntimeError):
    """A source could not be reached or did not return usable data.

    Covers transport errors, timeouts, non-2xx responses, undecodable bodies,
    and ``{"success": false}`` envelopes.

    Attributes:
        source:      Short source id (``"hypixel"``, ``"skycrypt"``).
        cause:       Upstream ``cause`` string or local error description.
        status_code: HTTP status, when a response was received.
    """

    def __init__(self, source: str, cause: str, status_code: Optional[int] = None) -> None:
        self.source = source
        self.cause = cause
        self.status_code = status_code
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{source} unavailable{status}: {cause}")


class NotFound(LookupError):
    """The source answered, but has no such account, profile, or member.

    Attributes:
        source: Short source id.
        what:   Description of the missing entity, e.g. ``"profile abc"``.
    """

    def __init__(self, source: str, what: str) -> None:
        self.source = source
        self.what = what
        super().__init__(f"{source}: {what} not found")
