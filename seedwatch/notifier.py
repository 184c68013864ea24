"""
seedwatch.notifier — Discord Channel Notifier
==============================================

Fire-and-forget delivery.  The tracker hands over content and/or an embed;
if the channel can't be resolved or Discord rejects the message, the
failure is logged and swallowed — a report is never retried mid-cycle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import discord
from discord.abc import Messageable

if TYPE_CHECKING:
    from discord.ext.commands import Bot

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send(
        self,
        *,
        content: str | None = None,
        embed: discord.Embed | None = None,
        allowed_mentions: discord.AllowedMentions | None = None,
    ) -> discord.Message | None: ...


class DiscordChannelNotifier:
    """Sends to one text channel, looked up by id on every send.

    The channel is resolved lazily because it is only in the bot's cache
    once the gateway is ready.
    """

    def __init__(self, bot: Bot, channel_id: int) -> None:
        self.bot = bot
        self.channel_id = channel_id

    def resolve_channel(self) -> Messageable | None:
        channel = self.bot.get_channel(self.channel_id)
        if channel is None:
            logger.warning("Notification channel %d not found", self.channel_id)
            return None
        if not isinstance(channel, Messageable):
            logger.warning("Channel %d is not a text channel", self.channel_id)
            return None
        return channel

    async def send(
        self,
        *,
        content: str | None = None,
        embed: discord.Embed | None = None,
        allowed_mentions: discord.AllowedMentions | None = None,
    ) -> discord.Message | None:
        channel = self.resolve_channel()
        if channel is None:
            return None
        kwargs: dict = {"content": content, "embed": embed}
        if allowed_mentions is not None:
            kwargs["allowed_mentions"] = allowed_mentions
        try:
            return await channel.send(**kwargs)
        except Exception:
            logger.exception("Failed to send message to channel %d", self.channel_id)
            return None
