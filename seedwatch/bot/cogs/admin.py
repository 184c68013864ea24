"""
seedwatch.bot.cogs.admin — Admin Slash Commands
================================================

- /roster-sync     — re-pull clan tags from the whitelister now
- /playtime-report — post the trailing-window report now

Both require the configured ``admin_role_id`` (or Manage Server when no
role is configured).  Replies are ephemeral.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

if TYPE_CHECKING:
    from seedwatch.bot.core import SeedwatchBot

logger = logging.getLogger(__name__)


def is_admin():
    """Decorator that checks if the user has the configured admin role."""
    async def predicate(interaction: discord.Interaction) -> bool:
        bot: SeedwatchBot = interaction.client  # type: ignore[assignment]
        user = interaction.user
        if not user or not hasattr(user, "roles"):
            return False
        admin_role_id = bot.cfg.admin_role_id
        if admin_role_id is None:
            return user.guild_permissions.manage_guild
        return any(role.id == admin_role_id for role in user.roles)
    return app_commands.check(predicate)


class Admin(commands.Cog, name="Admin"):
    """Manual triggers for the tracker."""

    def __init__(self, bot: SeedwatchBot) -> None:
        self.bot = bot

    @app_commands.command(name="roster-sync", description="Re-sync clan tags from the whitelister.")
    @is_admin()
    async def roster_sync(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        result = await self.bot.tracker.sync()
        if result is None:
            await interaction.followup.send(
                "❌ Roster sync failed — stored clan tags were left unchanged. "
                "Check the bot logs.",
                ephemeral=True,
            )
            return
        logger.info("Manual roster sync by %s", interaction.user)
        await interaction.followup.send(
            f"✅ Synced {result['entries']} whitelist entries across "
            f"{result['groups']} clans: {result['created']} new players, "
            f"{result['changed']} tags changed, {result['unresolved']} without clan.",
            ephemeral=True,
        )

    @app_commands.command(name="playtime-report", description="Post the playtime report for the last 7 days now.")
    @is_admin()
    async def playtime_report(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        report = await self.bot.tracker.report()
        if report is None:
            await interaction.followup.send(
                "❌ Could not build the report. Check the bot logs.", ephemeral=True,
            )
            return
        logger.info("Manual playtime report by %s", interaction.user)
        await interaction.followup.send(
            f"✅ Report for {report.start.isoformat()} → {report.end.isoformat()} "
            f"posted ({len(report.rows)} clans).",
            ephemeral=True,
        )


async def setup(bot: SeedwatchBot) -> None:
    await bot.add_cog(Admin(bot))
