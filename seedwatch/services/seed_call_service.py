"""
seedwatch.services.seed_call_service — Daily Seeding Call-Out
==============================================================

Posts a configured "seeding has started" message once a day at a fixed
UTC time, pinging the configured roles.  If the server is already past
the seeding band when the time comes, nothing is posted.

On announcement channels the message is also crossposted to followers;
a failed crosspost is logged and otherwise ignored.
"""

from __future__ import annotations

import logging

import discord

from seedwatch.config import SeedCallSettings, SeedingThresholds
from seedwatch.engine.population import is_seeded
from seedwatch.errors import FeedError
from seedwatch.feed import LiveFeed
from seedwatch.notifier import Notifier

logger = logging.getLogger(__name__)


def build_seed_call_content(message: str, ping_roles: tuple[int, ...] = ()) -> str:
    """Append role mentions (``<@&id>``) after a blank line, if any."""
    if not ping_roles:
        return message
    mentions = " ".join(f"<@&{role_id}>" for role_id in ping_roles)
    return f"{message}\n\n{mentions}"


async def send_seed_call(
    feed: LiveFeed,
    notifier: Notifier,
    settings: SeedCallSettings,
    thresholds: SeedingThresholds,
) -> discord.Message | None:
    """Send the seed call unless the server is already seeded.

    Returns the sent message, or ``None`` if nothing was sent.
    """
    try:
        snapshot = await feed.snapshot()
    except FeedError:
        # Unknown population: better to call for seeders than stay silent
        logger.warning("Live feed unavailable — sending seed call anyway", exc_info=True)
    else:
        if is_seeded(snapshot.player_count, thresholds):
            logger.info(
                "Server already seeded (%d players) — skipping seed call",
                snapshot.player_count,
            )
            return None

    content = build_seed_call_content(settings.message, settings.ping_roles)
    message = await notifier.send(
        content=content,
        allowed_mentions=discord.AllowedMentions(
            everyone=False, users=False, roles=True,
        ),
    )
    if message is None:
        return None

    logger.info("Sent seed call to channel %d", settings.channel_id)

    if getattr(message.channel, "is_news", lambda: False)():
        try:
            await message.publish()
            logger.info("Seed call crossposted")
        except Exception:
            logger.exception("Failed to crosspost seed call")

    return message
