"""Message listener Cog for jobwatch.

This cog has exactly ONE responsibility: translate Discord message events into
:class:`InboundMessage` objects and hand them to the :class:`ModerationHandler`,
which decides whether to post a report.
"""

import discord
from discord.ext import commands

from jobwatch.datatypes.moderation_datatypes import InboundMessage
from jobwatch.moderation.handler import ModerationHandler
from jobwatch.util.logger import get_logger

logger = get_logger("message_listener_cog")


def to_inbound_message(message: discord.Message) -> InboundMessage:
    """Project a ``discord.Message`` onto the fields the handler needs."""
    return InboundMessage(
        community_id=message.guild.id if message.guild is not None else None,
        author_is_bot=bool(message.author.bot),
        author_id=message.author.id,
        text=message.content or "",
        permalink=message.jump_url,
    )


class MessageListenerCog(commands.Cog):
    """
    Thin event listener that forwards messages to the moderation handler.

    Parameters
    ----------
    bot:
        Discord bot instance, used to resolve report channels.
    handler:
        Makes the moderation decision for each message.
    """

    def __init__(self, bot: discord.Bot, handler: ModerationHandler) -> None:
        self.bot = bot
        self._handler = handler
        logger.info("[MESSAGE LISTENER] Message listener cog loaded")

    async def send_report(self, channel_id: int, embed: discord.Embed) -> None:
        """Post ``embed`` to ``channel_id``, fetching the channel if it is not cached."""
        channel = self.bot.get_channel(channel_id)
        if channel is None:
            channel = await self.bot.fetch_channel(channel_id)
        await channel.send(embed=embed)

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message) -> None:
        await self._handler.on_message(to_inbound_message(message), self.send_report)


def setup(bot: discord.Bot, handler: ModerationHandler) -> None:
    """Register the MessageListenerCog with the bot."""
    bot.add_cog(MessageListenerCog(bot, handler))
