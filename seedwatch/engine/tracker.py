"""
seedwatch.engine.tracker — The Playtime Tracker
================================================

**Why this file exists:**
This is the one object with real state.  It holds the three things the
tracker talks to — the live feed, the database engine and the notifier —
and exposes the three operations the scheduler drives:

- :meth:`PlaytimeTracker.sync`   — pull clan tags from the whitelister.
- :meth:`PlaytimeTracker.tick`   — count one minute for everyone online.
- :meth:`PlaytimeTracker.report` — post the trailing-window clan table.

Nothing in here knows about ``discord.ext.tasks``; the cog in
:mod:`seedwatch.bot.cogs.tracker` owns the loops.  Every operation logs
and swallows its own failure so one bad cycle never kills a loop.

Ticks are serialised: if a tick is still running when the next one is
due (slow DB, slow feed), the new one is skipped rather than run
concurrently, since two overlapping ticks would double-count a minute.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime

import httpx
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from seedwatch.config import RosterSettings, SeedingThresholds
from seedwatch.database.engine import run_db
from seedwatch.database.models import TickKind
from seedwatch.engine.population import classify_population
from seedwatch.errors import FeedError, RosterSyncError
from seedwatch.feed import LiveFeed
from seedwatch.notifier import Notifier
from seedwatch.services.embeds import build_report_embed
from seedwatch.services.playtime_service import record_tick
from seedwatch.services.report_service import WindowReport, build_window_report
from seedwatch.services.roster_service import apply_roster, fetch_roster

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class TickResult:
    """Outcome of one accumulator tick."""

    kind: TickKind
    population: int
    day: date | None = None
    tracked: int = 0
    updated: int = 0


class PlaytimeTracker:
    """Scheduler-agnostic core: roster sync, minute ticks, weekly report.

    Parameters
    ----------
    engine:
        SQLAlchemy engine holding ``players`` and ``playtimes``.
    feed:
        Source of the live population (see :mod:`seedwatch.feed`).
    notifier:
        Where reports go (see :mod:`seedwatch.notifier`).
    roster:
        Whitelister endpoint + credentials.
    thresholds:
        Seeding band.
    report_days:
        Length of the trailing report window in whole days.
    http_client:
        Client for the whitelister; one is created if omitted.
    clock:
        Returns the current aware UTC datetime.  Read fresh on every call.
    """

    def __init__(
        self,
        engine: Engine,
        feed: LiveFeed,
        notifier: Notifier,
        *,
        roster: RosterSettings,
        thresholds: SeedingThresholds,
        report_days: int = 7,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.engine = engine
        self.feed = feed
        self.notifier = notifier
        self.roster = roster
        self.thresholds = thresholds
        self.report_days = report_days
        self._http = http_client or httpx.AsyncClient(timeout=roster.timeout_seconds)
        self.clock = clock

        self._tick_lock = asyncio.Lock()
        self._sync_lock = asyncio.Lock()

    # -------------------------------------------------------------------
    # Roster sync
    # -------------------------------------------------------------------
    async def sync(self) -> dict[str, int] | None:
        """Pull clan tags from the whitelister and upsert them.

        Returns the summary from :func:`apply_roster`, or ``None`` if the
        fetch or the write failed (stored tags are left untouched).
        """
        async with self._sync_lock:
            try:
                snapshot = await fetch_roster(self._http, self.roster)
            except RosterSyncError as exc:
                logger.warning("Roster sync aborted: %s", exc, extra={"task": "roster_sync"})
                return None

            try:
                result = await run_db(apply_roster, self.engine, snapshot)
            except SQLAlchemyError:
                logger.exception("Roster sync write failed", extra={"task": "roster_sync"})
                return None

        logger.info(
            "Roster sync complete: %d clans, %d entries, %d created, "
            "%d changed, %d without clan",
            result["groups"], result["entries"], result["created"],
            result["changed"], result["unresolved"],
        )
        return result

    # -------------------------------------------------------------------
    # Accumulator tick
    # -------------------------------------------------------------------
    async def tick(self) -> TickResult | None:
        """Count one minute for every tracked, connected player.

        Returns ``None`` when the tick was skipped because of an overlap or
        a failure; otherwise a :class:`TickResult` (``SKIP`` kind when the
        server is below the seeding band).
        """
        if self._tick_lock.locked():
            logger.warning("Previous playtime tick still running — skipping this one")
            return None

        async with self._tick_lock:
            try:
                snapshot = await self.feed.snapshot()
            except FeedError as exc:
                logger.warning("Playtime tick skipped: %s", exc, extra={"task": "tick"})
                return None

            population = snapshot.player_count
            kind = classify_population(population, self.thresholds)
            if kind is TickKind.SKIP:
                logger.debug(
                    "Population %d below seeding threshold %d — nothing counted",
                    population, self.thresholds.lower,
                )
                return TickResult(kind=kind, population=population)

            day = self.clock().astimezone(UTC).date()
            try:
                counts = await run_db(
                    record_tick, self.engine, snapshot.player_ids, kind, day,
                )
            except SQLAlchemyError:
                logger.exception("Playtime tick failed", extra={"task": "tick"})
                return None

        return TickResult(
            kind=kind,
            population=population,
            day=day,
            tracked=counts["tracked"],
            updated=counts["updated"],
        )

    # -------------------------------------------------------------------
    # Weekly report
    # -------------------------------------------------------------------
    async def report(self) -> WindowReport | None:
        """Aggregate the trailing window and post it.

        Returns the report that was built (even if delivery failed), or
        ``None`` if the query failed and nothing was sent.
        """
        now = self.clock()
        try:
            report = await run_db(
                build_window_report, self.engine, now, self.report_days,
            )
        except SQLAlchemyError:
            logger.exception("Playtime report query failed", extra={"task": "report"})
            return None

        try:
            await self.notifier.send(embed=build_report_embed(report))
        except Exception:
            logger.exception("Playtime report delivery failed", extra={"task": "report"})
        return report

    async def close(self) -> None:
        """Release the whitelister HTTP client."""
        await self._http.aclose()
