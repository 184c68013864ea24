"""
seedwatch.bot.core — Bot Instance & Cog Loader
===============================================

**Why this file exists:**
Defines :class:`SeedwatchBot`, a ``commands.Bot`` subclass that:

1. Stores the shared config (``bot.cfg``), DB engine (``bot.engine``)
   and the :class:`PlaytimeTracker` (``bot.tracker``) so every Cog can
   reach them via ``self.bot.*``.
2. Loads the tracker and admin cogs.
3. Syncs the slash-command tree on startup (guild-scoped for dev, global
   for production — controlled by the ``DEV_GUILD_ID`` env var).

The tracker itself has no idea it runs inside a Discord bot: it gets the
live feed, the engine and a channel notifier injected here.
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands
from sqlalchemy import Engine

from seedwatch.config import SeedwatchConfig
from seedwatch.engine.tracker import PlaytimeTracker
from seedwatch.feed import HttpStatusFeed
from seedwatch.notifier import DiscordChannelNotifier

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "seedwatch.bot.cogs.tracker",
    "seedwatch.bot.cogs.admin",
]


class SeedwatchBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`SeedwatchConfig` from ``config.yaml``.
    engine:
        A SQLAlchemy :class:`Engine` with the playtime tables.
    """

    def __init__(self, cfg: SeedwatchConfig, engine: Engine) -> None:
        # Only guild + channel events are needed; no privileged intents.
        intents = discord.Intents.default()
        intents.message_content = False
        intents.presences = False

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            description="Seedwatch — seeding & playtime tracker",
        )

        self.cfg = cfg
        self.engine = engine

        self.feed = HttpStatusFeed(cfg.feed)
        self.tracker = PlaytimeTracker(
            engine,
            self.feed,
            DiscordChannelNotifier(self, cfg.report_channel_id),
            roster=cfg.roster,
            thresholds=cfg.seeding,
            report_days=cfg.report.window_days,
        )

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all Cog extensions.  One broken Cog doesn't stop the others."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        dev_guild_id = os.getenv("DEV_GUILD_ID")
        if dev_guild_id:
            guild = discord.Object(id=int(dev_guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
        else:
            synced = await self.tree.sync()
            logger.info("Synced %d commands globally", len(synced))

    async def close(self) -> None:
        """Graceful shutdown — unloading cogs cancels the loops, then clients close."""
        logger.info("Bot shutting down…")
        await super().close()
        await self.tracker.close()
        await self.feed.aclose()
