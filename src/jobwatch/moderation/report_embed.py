"""
Report construction and Discord embed rendering.
"""

from __future__ import annotations

import discord

from jobwatch.datatypes.moderation_datatypes import InboundMessage, Report
from jobwatch.util.text_utils import truncate_graphemes


def format_elapsed(seconds: float) -> str:
    return f"took {seconds:.2f} seconds"


def build_report(
    message: InboundMessage,
    channel_id: int,
    max_graphemes: int,
    elapsed_seconds: float | None = None,
) -> Report:
    """
    Build the report for a violating message.

    Args:
        message: The offending message.
        channel_id: Destination report channel.
        max_graphemes: Summary length limit in grapheme clusters.
        elapsed_seconds: Classification time shown in the footer, if measured.
    """
    return Report(
        channel_id=channel_id,
        summary_text=truncate_graphemes(message.text, max_graphemes),
        source_link=message.permalink,
        footer_text=format_elapsed(elapsed_seconds) if elapsed_seconds is not None else None,
    )


def create_report_embed(report: Report) -> discord.Embed:
    """Render ``report`` as an embed: title, summary field, link field, optional footer."""
    embed = discord.Embed(title=report.title, color=discord.Color.orange())
    embed.add_field(name="summary", value=report.summary_text, inline=False)
    embed.add_field(name="message link", value=report.source_link, inline=False)
    if report.footer_text:
        embed.set_footer(text=report.footer_text)
    return embed
