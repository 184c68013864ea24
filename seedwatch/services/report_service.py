"""
seedwatch.services.report_service — Trailing-Window Clan Report
================================================================

Aggregates ``playtimes`` over the last *N* whole UTC days (default 7,
today excluded) and groups the sums by clan tag.

Window for a report generated on Monday 2026-10-19::

    start = 2026-10-12   (today - 7 days)
    end   = 2026-10-18   (today - 1 day)     — both inclusive

Players without a clan tag are summed into the ``unaffiliated`` bucket.
Rows are ordered by tag (case-insensitive), with ``unaffiliated`` last.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import Engine, func, select

from seedwatch.database.engine import get_session
from seedwatch.database.models import Player, Playtime

logger = logging.getLogger(__name__)

UNAFFILIATED = "unaffiliated"

TABLE_HEADERS = ("Clan", "Seeded", "Played")


@dataclass(frozen=True, slots=True)
class ClanTotals:
    clan: str | None  # None is the unaffiliated bucket
    minutes_seeded: int
    minutes_played: int

    @property
    def label(self) -> str:
        return self.clan if self.clan is not None else UNAFFILIATED


@dataclass(frozen=True, slots=True)
class WindowReport:
    start: date
    end: date
    rows: list[ClanTotals]


def trailing_window(now: datetime, days: int = 7) -> tuple[date, date]:
    """Return ``(start, end)`` — the *days* whole UTC days before *now*."""
    today = now.astimezone(UTC).date()
    return today - timedelta(days=days), today - timedelta(days=1)


def _sort_key(row: ClanTotals) -> tuple[bool, str]:
    return (row.clan is None, (row.clan or "").casefold())


def aggregate_window(engine: Engine, start: date, end: date) -> list[ClanTotals]:
    """Sum seeded/played minutes per clan tag for ``start <= date <= end``."""
    with get_session(engine) as session:
        rows = session.execute(
            select(
                Player.clan_tag,
                func.coalesce(func.sum(Playtime.minutes_seeded), 0).label("seeded"),
                func.coalesce(func.sum(Playtime.minutes_played), 0).label("played"),
            )
            .join(Playtime, Playtime.steam_id == Player.steam_id)
            .where(Playtime.date >= start, Playtime.date <= end)
            .group_by(Player.clan_tag)
        ).all()

    totals = [
        ClanTotals(
            clan=row.clan_tag,
            minutes_seeded=int(row.seeded),
            minutes_played=int(row.played),
        )
        for row in rows
    ]
    return sorted(totals, key=_sort_key)


def build_window_report(engine: Engine, now: datetime, days: int = 7) -> WindowReport:
    """Compute the trailing window for *now* and aggregate it."""
    start, end = trailing_window(now, days)
    rows = aggregate_window(engine, start, end)
    logger.info(
        "Playtime report %s → %s: %d clan rows",
        start.isoformat(), end.isoformat(), len(rows),
    )
    return WindowReport(start=start, end=end, rows=rows)


def render_table(rows: list[ClanTotals], max_length: int | None = None) -> str:
    """Render *rows* as a fixed-width text table (minutes).

    If *max_length* is given and the table would exceed it, trailing rows
    are dropped and replaced with a ``… and N more`` line.
    """
    body = [(r.label, str(r.minutes_seeded), str(r.minutes_played)) for r in rows]
    widths = [
        max(len(TABLE_HEADERS[i]), *(len(line[i]) for line in body)) if body
        else len(TABLE_HEADERS[i])
        for i in range(3)
    ]

    def fmt(cells: tuple[str, str, str]) -> str:
        return "  ".join((
            cells[0].ljust(widths[0]),
            cells[1].rjust(widths[1]),
            cells[2].rjust(widths[2]),
        )).rstrip()

    lines = [fmt(TABLE_HEADERS), "  ".join("-" * w for w in widths)]
    lines.extend(fmt(cells) for cells in body)

    if max_length is None or len("\n".join(lines)) <= max_length:
        return "\n".join(lines)

    # Drop rows from the end until the table plus the overflow note fits
    kept = lines[:]
    while len(kept) > 2:
        kept.pop()
        dropped = len(lines) - len(kept)
        candidate = "\n".join([*kept, f"… and {dropped} more"])
        if len(candidate) <= max_length:
            return candidate
    return "\n".join(kept)
