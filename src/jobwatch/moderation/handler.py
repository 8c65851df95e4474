"""
Per-message moderation decisions.

:class:`ModerationHandler` is gateway independent: it takes an
:class:`InboundMessage`, decides whether a report is warranted and hands the
rendered report to a ``ReportSender`` coroutine. The Discord cog is the only
place that knows about ``discord.Message``.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable

import discord

from jobwatch.ai.classifier import evaluate_message
from jobwatch.ai.model_client import ModelHandle
from jobwatch.configuration.moderation_settings import ModerationConfig
from jobwatch.datatypes.moderation_datatypes import InboundMessage, Report
from jobwatch.moderation.report_embed import build_report, create_report_embed
from jobwatch.util.logger import get_logger

logger = get_logger("moderation_handler")

Evaluator = Callable[[ModelHandle, str], Awaitable[bool]]
ReportSender = Callable[[int, discord.Embed], Awaitable[None]]


class ModerationHandler:
    """
    Filter, classify and report one message at a time.

    Holds only immutable state (model handle, policy), so any number of
    ``on_message`` calls may run concurrently.

    Parameters
    ----------
    model:
        Shared model handle passed through to the evaluator.
    config:
        Moderation policy (self id, report channels, summary length).
    evaluator:
        ``async (model, text) -> bool``; defaults to
        :func:`jobwatch.ai.classifier.evaluate_message`.
    """

    def __init__(
        self,
        model: ModelHandle,
        config: ModerationConfig,
        evaluator: Evaluator = evaluate_message,
    ) -> None:
        self._model = model
        self._config = config
        self._evaluate = evaluator

    @property
    def config(self) -> ModerationConfig:
        return self._config

    def report_channel_for(self, message: InboundMessage) -> int | None:
        """Return the report channel if ``message`` should be classified, else None."""
        if message.community_id is None:
            logger.warning("[HANDLER] Message without community id (author %s); skipping", message.author_id)
            return None

        if not message.text or message.author_is_bot or message.author_id == self._config.self_user_id:
            logger.debug("[HANDLER] Message is empty or from a bot, skipping")
            return None

        channel_id = self._config.report_channel_for(message.community_id)
        if channel_id is None:
            logger.debug("[HANDLER] Community %s is not moderated", message.community_id)
        return channel_id

    async def handle(self, message: InboundMessage) -> Report | None:
        """Return the report to send for ``message``, or None when nothing should be sent."""
        channel_id = self.report_channel_for(message)
        if channel_id is None:
            return None

        started = time.perf_counter()
        violates_rules = await self._evaluate(self._model, message.text)
        elapsed = time.perf_counter() - started

        if not violates_rules:
            logger.debug("[HANDLER] No violation in community %s (%.2fs)", message.community_id, elapsed)
            return None

        logger.info(
            "[HANDLER] Violation by %s in community %s (%.2fs): %s",
            message.author_id,
            message.community_id,
            elapsed,
            message.permalink,
        )
        return build_report(message, channel_id, self._config.summary_max_graphemes, elapsed)

    async def deliver(self, report: Report, send: ReportSender) -> bool:
        """Send ``report`` once. Failures are logged and reported as False, never raised."""
        try:
            await send(report.channel_id, create_report_embed(report))
        except Exception as exc:
            logger.error("[HANDLER] Failed to report to channel %s: %s", report.channel_id, exc)
            return False
        return True

    async def on_message(self, message: InboundMessage, send: ReportSender) -> Report | None:
        """Handle one inbound message end to end. Never raises."""
        logger.debug("[HANDLER] Received message event")
        try:
            report = await self.handle(message)
        except Exception:
            logger.exception("[HANDLER] Unexpected error while handling message %s", message.permalink)
            return None

        if report is not None:
            await self.deliver(report, send)
        return report
