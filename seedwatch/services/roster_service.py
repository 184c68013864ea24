"""
seedwatch.services.roster_service — Whitelister Clan Sync
==========================================================

Pulls the clan list and the clan whitelist from the whitelister API and
upserts ``players.clan_tag``.

How it works:
    1. ``GET /api/clans/getAllClans`` → ``[{"_id": …, "tag": …}, …]``
    2. ``GET /api/whitelist/read/getAll`` (scoped by ``sel_list_id``)
       → ``[{"steamid64": …, "id_clan": …}, …]``
    3. Both payloads are validated **before** anything is written.  Any
       HTTP error or malformed payload raises :class:`RosterSyncError` and
       the table is left exactly as it was.
    4. In one transaction: players whose clan resolves get that tag;
       players whose clan doesn't resolve keep whatever tag they had
       (new ones are created untagged).

Players are never deleted here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from sqlalchemy import Engine, select

from seedwatch.config import RosterSettings
from seedwatch.database.engine import get_session
from seedwatch.database.models import Player
from seedwatch.errors import RosterSyncError

logger = logging.getLogger(__name__)

CLANS_PATH = "/api/clans/getAllClans"
WHITELIST_PATH = "/api/whitelist/read/getAll"


@dataclass(frozen=True, slots=True)
class RosterEntry:
    """One whitelisted player and the clan id it references (if any)."""

    steam_id: str
    group_id: str | None


@dataclass(frozen=True, slots=True)
class RosterSnapshot:
    """A fully validated copy of the remote roster."""

    tags_by_group: dict[str, str]
    entries: list[RosterEntry]


# ---------------------------------------------------------------------------
# Remote fetch (async)
# ---------------------------------------------------------------------------
async def _get_json(client: httpx.AsyncClient, url: str, path: str, params: dict) -> object:
    # Error messages name the path only; the query string carries the API key.
    try:
        response = await client.get(url + path, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise RosterSyncError(
            f"{path} returned HTTP {exc.response.status_code}"
        ) from None
    except httpx.HTTPError as exc:
        raise RosterSyncError(f"{path} request failed: {type(exc).__name__}") from None

    try:
        return response.json()
    except ValueError:
        raise RosterSyncError(f"{path} returned a non-JSON body") from None


def parse_groups(payload: object) -> dict[str, str]:
    """Validate the clans payload and build ``group id → tag``."""
    if not isinstance(payload, list):
        raise RosterSyncError("clans payload is not a list")

    tags: dict[str, str] = {}
    for item in payload:
        if not isinstance(item, dict) or "_id" not in item:
            raise RosterSyncError(f"malformed clan entry: {item!r}")
        tag = item.get("tag")
        if tag:
            tags[str(item["_id"])] = str(tag)
    return tags


def parse_entries(payload: object) -> list[RosterEntry]:
    """Validate the whitelist payload."""
    if not isinstance(payload, list):
        raise RosterSyncError("whitelist payload is not a list")

    entries: list[RosterEntry] = []
    for item in payload:
        if not isinstance(item, dict) or not item.get("steamid64"):
            raise RosterSyncError(f"malformed whitelist entry: {item!r}")
        group_id = item.get("id_clan")
        entries.append(RosterEntry(
            steam_id=str(item["steamid64"]),
            group_id=str(group_id) if group_id else None,
        ))
    return entries


async def fetch_roster(client: httpx.AsyncClient, settings: RosterSettings) -> RosterSnapshot:
    """Fetch and validate both roster datasets.

    Raises
    ------
    RosterSyncError
        On any transport error, non-2xx response, or malformed payload.
    """
    clans = await _get_json(
        client, settings.base_url, CLANS_PATH, {"apiKey": settings.api_key},
    )
    tags_by_group = parse_groups(clans)

    whitelist = await _get_json(
        client,
        settings.base_url,
        WHITELIST_PATH,
        {"apiKey": settings.api_key, "sel_list_id": settings.list_id},
    )
    entries = parse_entries(whitelist)

    return RosterSnapshot(tags_by_group=tags_by_group, entries=entries)


# ---------------------------------------------------------------------------
# Apply (sync — run via run_db)
# ---------------------------------------------------------------------------
def apply_roster(engine: Engine, snapshot: RosterSnapshot) -> dict[str, int]:
    """Upsert player clan tags from a validated *snapshot*.

    Returns ``{"groups", "entries", "created", "changed", "unresolved"}``.
    Re-applying the same snapshot yields ``created == changed == 0``.
    """
    created = 0
    changed = 0
    unresolved = 0

    # One resolved tag per SteamID; the last entry with a resolvable clan wins
    resolved: dict[str, str | None] = {}
    for entry in snapshot.entries:
        tag = snapshot.tags_by_group.get(entry.group_id) if entry.group_id else None
        if tag is None:
            unresolved += 1
            resolved.setdefault(entry.steam_id, None)
        else:
            resolved[entry.steam_id] = tag

    with get_session(engine) as session:
        existing: dict[str, Player] = {}
        if resolved:
            existing = {
                p.steam_id: p
                for p in session.scalars(
                    select(Player).where(Player.steam_id.in_(sorted(resolved)))
                ).all()
            }

        for steam_id, tag in resolved.items():
            player = existing.get(steam_id)
            if player is None:
                session.add(Player(steam_id=steam_id, clan_tag=tag))
                created += 1
            elif tag is not None and player.clan_tag != tag:
                logger.debug("Clan tag for %s: %r → %r", steam_id, player.clan_tag, tag)
                player.clan_tag = tag
                changed += 1

    return {
        "groups": len(snapshot.tags_by_group),
        "entries": len(snapshot.entries),
        "created": created,
        "changed": changed,
        "unresolved": unresolved,
    }
