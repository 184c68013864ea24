"""
seedwatch.services.embeds — Discord embed builders
===================================================

All embed construction lives here so the tracker only needs to supply
data — no layout concerns.
"""

from __future__ import annotations

import discord

from seedwatch.services.report_service import WindowReport, render_table

# Discord caps embed descriptions at 4096 characters; leave room for the fence.
_DESCRIPTION_LIMIT = 4096
_CODE_FENCE = "```"


def build_report_embed(report: WindowReport) -> discord.Embed:
    """Build the weekly per-clan seeding/playtime embed."""
    max_table = _DESCRIPTION_LIMIT - 2 * len(_CODE_FENCE) - 2
    # An empty window still renders the header-only table
    table = render_table(report.rows, max_length=max_table)
    description = f"{_CODE_FENCE}\n{table}\n{_CODE_FENCE}"

    embed = discord.Embed(
        title="\U0001f4ca Weekly Seeding & Playtime (minutes)",
        description=description,
        color=discord.Color.blurple(),
    )
    embed.add_field(name="Start", value=report.start.isoformat(), inline=True)
    embed.add_field(name="End", value=report.end.isoformat(), inline=True)
    return embed
