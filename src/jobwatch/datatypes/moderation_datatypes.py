"""
Data structures flowing through the moderation pipeline.

Every object here lives for the handling of a single message: requests are
built per model call, reports are built once and sent once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Verdict(Enum):
    """Outcome of classifying one message."""

    VIOLATES = "violates"
    DOES_NOT_VIOLATE = "does_not_violate"
    INCONCLUSIVE = "inconclusive"

    def __str__(self) -> str:
        return self.value


class InconclusiveReason(Enum):
    """Why a classification produced no usable verdict."""

    CALL_FAILED = "call_failed"
    TIMEOUT = "timeout"
    NO_CHOICES = "no_choices"
    EMPTY_CONTENT = "empty_content"
    INVALID_RESPONSE = "invalid_response"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ClassificationRequest:
    """A single bounded chat request sent to the model.

    Attributes:
        system_instructions: Fixed rule text given as the system message.
        user_content: The chat message under evaluation.
        sampling_temperature: Sampling temperature, kept at or near zero.
        max_output_tokens: Hard cap on generated tokens.
        response_schema: JSON schema the response must conform to.
    """

    system_instructions: str
    user_content: str
    sampling_temperature: float
    max_output_tokens: int
    response_schema: Dict[str, Any]


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Parsed model answer."""

    violates_rules: bool


@dataclass(frozen=True, slots=True)
class ClassificationOutcome:
    """Tagged result of one classification attempt.

    ``reason`` and ``detail`` are only set for INCONCLUSIVE outcomes.
    """

    verdict: Verdict
    elapsed_seconds: float = 0.0
    reason: InconclusiveReason | None = None
    detail: str | None = None

    @property
    def violates_rules(self) -> bool:
        return self.verdict is Verdict.VIOLATES


@dataclass(frozen=True, slots=True)
class InboundMessage:
    """Gateway-independent view of a chat message.

    Attributes:
        community_id: Guild id, or None for direct messages.
        author_is_bot: Whether the author is a bot account.
        author_id: Author's account id.
        text: Raw message content.
        permalink: Link that jumps to the message.
    """

    community_id: int | None
    author_is_bot: bool
    author_id: int
    text: str
    permalink: str


@dataclass(frozen=True, slots=True)
class Report:
    """Notification posted to moderators for one violating message."""

    channel_id: int
    summary_text: str
    source_link: str
    footer_text: str | None = None
    title: str = "found violating message"
