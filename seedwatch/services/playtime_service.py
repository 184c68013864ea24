"""
seedwatch.services.playtime_service — Per-Day Counter Upserts
==============================================================

The storage half of the accumulator tick.  Given the connected SteamIDs
and the tick's classification, bumps exactly one counter by one minute
for every player already present in ``players``.

Each increment is a single ``INSERT … ON CONFLICT DO UPDATE`` (or
``ON DUPLICATE KEY UPDATE`` on MySQL) committed on its own, so the
counter never goes through a read-then-write in Python and a failure
midway leaves every player either fully counted or untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from sqlalchemy import Engine, select
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from seedwatch.database.engine import get_session
from seedwatch.database.models import Player, Playtime, TickKind

logger = logging.getLogger(__name__)

_COLUMN_FOR_KIND: dict[TickKind, str] = {
    TickKind.SEEDED: "minutes_seeded",
    TickKind.PLAYED: "minutes_played",
}


def _increment_stmt(dialect: str, steam_id: str, day: date, column: str):
    """Build the dialect-specific "insert 1 or add 1" statement."""
    table = Playtime.__table__
    values = {
        "steam_id": steam_id,
        "date": day,
        "minutes_played": 0,
        "minutes_seeded": 0,
    }
    values[column] = 1
    bump = {column: table.c[column] + 1}

    if dialect == "postgresql":
        return pg_insert(table).values(**values).on_conflict_do_update(
            index_elements=["steam_id", "date"], set_=bump,
        )
    if dialect == "sqlite":
        return sqlite_insert(table).values(**values).on_conflict_do_update(
            index_elements=["steam_id", "date"], set_=bump,
        )
    if dialect in ("mysql", "mariadb"):
        return mysql_insert(table).values(**values).on_duplicate_key_update(bump)
    raise NotImplementedError(f"No playtime upsert for dialect {dialect!r}")


def tracked_players(engine: Engine, steam_ids: Iterable[str]) -> list[str]:
    """Return the subset of *steam_ids* present in ``players``, sorted."""
    wanted = set(steam_ids)
    if not wanted:
        return []
    with get_session(engine) as session:
        found = session.scalars(
            select(Player.steam_id).where(Player.steam_id.in_(sorted(wanted)))
        ).all()
    return sorted(found)


def record_tick(
    engine: Engine,
    steam_ids: Iterable[str],
    kind: TickKind,
    day: date,
) -> dict[str, int]:
    """Add one minute of *kind* on *day* for every tracked player in *steam_ids*.

    Players not already in ``players`` are ignored; this never creates a
    player.  A ``SKIP`` tick is a no-op.

    Returns ``{"tracked": N, "updated": M}``.  A database error is raised
    as-is after the players before it have been committed.
    """
    if kind is TickKind.SKIP:
        return {"tracked": 0, "updated": 0}

    column = _COLUMN_FOR_KIND[kind]
    players = tracked_players(engine, steam_ids)
    dialect = engine.dialect.name

    updated = 0
    for steam_id in players:
        with get_session(engine) as session:
            session.execute(_increment_stmt(dialect, steam_id, day, column))
        updated += 1

    logger.debug(
        "Tick %s on %s: %d/%d tracked players updated",
        kind, day.isoformat(), updated, len(players),
    )
    return {"tracked": len(players), "updated": updated}
