"""
seedwatch.feed — Live Population Feed
======================================

The game server itself is not part of Seedwatch.  The tracker only needs
two facts per tick: how many players are on, and which SteamIDs they
are.  :class:`LiveFeed` is that boundary.

:class:`HttpStatusFeed` reads it from a JSON status endpoint shaped like
the one a SquadJS-style host exposes::

    {
      "playerCount": 42,
      "players": [{"steamID": "76561198000000001", "name": "…"}, …]
    }

``playerCount`` is authoritative for classification; the player list may
be shorter while people are still loading in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from seedwatch.config import FeedSettings
from seedwatch.errors import FeedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PopulationSnapshot:
    player_count: int
    player_ids: tuple[str, ...]


class LiveFeed(Protocol):
    async def snapshot(self) -> PopulationSnapshot: ...


def parse_status(payload: object) -> PopulationSnapshot:
    """Turn a status JSON document into a :class:`PopulationSnapshot`.

    Raises
    ------
    FeedError
        If the document isn't an object or ``playerCount`` is invalid.
    """
    if not isinstance(payload, dict):
        raise FeedError("status payload is not an object")

    players = payload.get("players") or []
    if not isinstance(players, list):
        raise FeedError("status 'players' is not a list")

    # Players still connecting may not have a SteamID yet
    ids = tuple(
        str(p["steamID"]) for p in players
        if isinstance(p, dict) and p.get("steamID")
    )

    count = payload.get("playerCount", len(players))
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise FeedError(f"invalid playerCount: {count!r}")

    return PopulationSnapshot(player_count=count, player_ids=ids)


class HttpStatusFeed:
    """Polls a JSON status endpoint once per call to :meth:`snapshot`."""

    def __init__(
        self,
        settings: FeedSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.timeout_seconds)

    async def snapshot(self) -> PopulationSnapshot:
        try:
            response = await self._client.get(self.settings.url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise FeedError(f"status request failed: {exc}") from exc
        except ValueError as exc:
            raise FeedError("status endpoint returned a non-JSON body") from exc
        return parse_status(payload)

    async def aclose(self) -> None:
        await self._client.aclose()
