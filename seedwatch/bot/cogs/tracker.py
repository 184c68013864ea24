"""
seedwatch.bot.cogs.tracker — Playtime Scheduling
=================================================

Owns every timer in the bot, each a ``discord.ext.tasks`` loop:

- **Roster sync** — once on startup, then every ``roster.sync_interval_hours``.
- **Playtime tick** — every ``tick_seconds`` (default 60).
- **Weekly report** — daily at ``report.hour`` UTC, posts only on
  ``report.weekday``.
- **Seed call** — daily at ``seed_call.time`` UTC, if configured.

A ``tasks.loop`` never runs two iterations of itself at once, and all
loops are cancelled in :meth:`cog_unload`.  Loop bodies never raise:
a failure is logged and the next iteration runs as scheduled.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, time
from typing import TYPE_CHECKING

from discord.ext import commands, tasks

from seedwatch.notifier import DiscordChannelNotifier
from seedwatch.services.seed_call_service import send_seed_call

if TYPE_CHECKING:
    from seedwatch.bot.core import SeedwatchBot

logger = logging.getLogger(__name__)


def is_report_day(now: datetime, weekday: int) -> bool:
    """True if *now* falls on *weekday* (Monday = 0) in UTC."""
    return now.astimezone(UTC).weekday() == weekday


class Tracker(commands.Cog, name="Tracker"):
    """Drives :class:`PlaytimeTracker` on fixed schedules."""

    def __init__(self, bot: SeedwatchBot) -> None:
        self.bot = bot
        self.tracker = bot.tracker

    async def cog_load(self) -> None:
        """Apply configured intervals and start the loops."""
        cfg = self.bot.cfg

        self.roster_loop.change_interval(hours=cfg.roster.sync_interval_hours)
        self.tick_loop.change_interval(seconds=cfg.tick_seconds)
        self.report_loop.change_interval(time=time(hour=cfg.report.hour, tzinfo=UTC))

        self.roster_loop.start()
        self.tick_loop.start()
        self.report_loop.start()

        if cfg.seed_call is not None:
            self.seed_call_loop.change_interval(time=cfg.seed_call.at)
            self.seed_call_loop.start()

        logger.info(
            "Tracker loops started: tick=%ss, roster every %sh, report weekday=%d %02d:00 UTC",
            cfg.tick_seconds, cfg.roster.sync_interval_hours,
            cfg.report.weekday, cfg.report.hour,
        )

    async def cog_unload(self) -> None:
        """Cancel all loops.  An in-flight tick finishes its current upsert."""
        self.roster_loop.cancel()
        self.tick_loop.cancel()
        self.report_loop.cancel()
        self.seed_call_loop.cancel()

    # -------------------------------------------------------------------
    # Roster sync
    # -------------------------------------------------------------------
    @tasks.loop(hours=24)
    async def roster_loop(self) -> None:
        """Pull clan tags from the whitelister."""
        try:
            await self.tracker.sync()
        except Exception:
            logger.exception("Roster sync task failed", extra={"task": "roster_sync"})

    # -------------------------------------------------------------------
    # Playtime tick
    # -------------------------------------------------------------------
    @tasks.loop(seconds=60)
    async def tick_loop(self) -> None:
        """Count one minute for every tracked player online."""
        try:
            await self.tracker.tick()
        except Exception:
            logger.exception("Playtime tick task failed", extra={"task": "tick"})

    # -------------------------------------------------------------------
    # Weekly report
    # -------------------------------------------------------------------
    @tasks.loop(time=time(hour=12, tzinfo=UTC))
    async def report_loop(self) -> None:
        """Post the trailing-window clan report on the configured weekday."""
        if not is_report_day(self.tracker.clock(), self.bot.cfg.report.weekday):
            return
        try:
            await self.tracker.report()
        except Exception:
            logger.exception("Playtime report task failed", extra={"task": "report"})

    @report_loop.before_loop
    async def _wait_report(self) -> None:
        await self.bot.wait_until_ready()

    # -------------------------------------------------------------------
    # Seed call
    # -------------------------------------------------------------------
    @tasks.loop(time=time(hour=15, tzinfo=UTC))
    async def seed_call_loop(self) -> None:
        """Post the daily seeding call-out unless the server is already full."""
        settings = self.bot.cfg.seed_call
        if settings is None:
            return
        try:
            await send_seed_call(
                self.tracker.feed,
                DiscordChannelNotifier(self.bot, settings.channel_id),
                settings,
                self.bot.cfg.seeding,
            )
        except Exception:
            logger.exception("Seed call task failed", extra={"task": "seed_call"})

    @seed_call_loop.before_loop
    async def _wait_seed_call(self) -> None:
        await self.bot.wait_until_ready()


async def setup(bot: SeedwatchBot) -> None:
    await bot.add_cog(Tracker(bot))
