"""
Job-post / recruitment classifier.

Asks the model a single yes/no question about one chat message under a fixed
system prompt and a strict ``{"violates_rules": bool}`` response schema.

Any failure along the way (transport error, timeout, empty or malformed
answer) yields an INCONCLUSIVE outcome, which :func:`evaluate_message`
collapses to ``False``: an inconclusive model interaction never produces a
report on its own.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Dict

import jsonschema
from jsonschema import ValidationError

from jobwatch.ai.model_client import ModelHandle, send_chat_request
from jobwatch.datatypes.moderation_datatypes import (
    ClassificationOutcome,
    ClassificationRequest,
    ClassificationResult,
    InconclusiveReason,
    Verdict,
)
from jobwatch.util.logger import get_logger

logger = get_logger("classifier")

SAMPLING_TEMPERATURE = 0.0
MAX_OUTPUT_TOKENS = 100

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "violates_rules": {"type": "boolean"},
    },
    "required": ["violates_rules"],
    "additionalProperties": False,
}

SYSTEM_PROMPT = (
    "You are a moderator for a Discord community. "
    "In this community users aren't allowed to send messages containing job posts. "
    "Users can't list their skills to attract recruiters. "
    "You will be provided messages to evaluate whether the user breaks these rules and "
    "you will respond true if it breaks the rules, false if it doesn't. "
    "Don't try to make indirect connections to the rules."
)


class ResponseParseError(ValueError):
    """Model content is not JSON matching RESPONSE_SCHEMA."""


def build_request(content: str) -> ClassificationRequest:
    """Build a fresh classification request for ``content``."""
    return ClassificationRequest(
        system_instructions=SYSTEM_PROMPT,
        user_content=content,
        sampling_temperature=SAMPLING_TEMPERATURE,
        max_output_tokens=MAX_OUTPUT_TOKENS,
        response_schema=RESPONSE_SCHEMA,
    )


def parse_response_content(raw: str) -> ClassificationResult:
    """Parse raw model text into a :class:`ClassificationResult`.

    Raises:
        ResponseParseError: If ``raw`` is not JSON or does not match the schema.
    """
    try:
        payload = json.loads(raw.strip())
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"invalid JSON: {exc}") from exc

    try:
        jsonschema.validate(instance=payload, schema=RESPONSE_SCHEMA)
    except ValidationError as exc:
        raise ResponseParseError(f"schema mismatch: {exc.message}") from exc

    return ClassificationResult(violates_rules=payload["violates_rules"])


def _inconclusive(
    content: str,
    reason: InconclusiveReason,
    detail: str,
    started: float,
) -> ClassificationOutcome:
    logger.error(
        "[CLASSIFIER] Inconclusive (%s): %s | content=%r",
        reason,
        detail,
        content,
    )
    return ClassificationOutcome(
        verdict=Verdict.INCONCLUSIVE,
        elapsed_seconds=time.perf_counter() - started,
        reason=reason,
        detail=detail,
    )


async def classify(model: ModelHandle, content: str) -> ClassificationOutcome:
    """
    Classify ``content`` and return a tagged outcome. Never raises.

    Args:
        model: Shared model handle.
        content: Arbitrary user text, possibly empty or adversarial.

    Returns:
        VIOLATES or DOES_NOT_VIOLATE when the model gave a valid answer,
        otherwise INCONCLUSIVE with the reason. Each inconclusive outcome logs
        exactly one error record.
    """
    started = time.perf_counter()
    request = build_request(content)

    try:
        response = await send_chat_request(model, request)
    except asyncio.TimeoutError:
        return _inconclusive(
            content, InconclusiveReason.TIMEOUT, f"no answer within {model.request_timeout}s", started
        )
    except Exception as exc:
        return _inconclusive(content, InconclusiveReason.CALL_FAILED, f"failed to run llm: {exc!r}", started)

    choices = getattr(response, "choices", None) or []
    if not choices:
        return _inconclusive(content, InconclusiveReason.NO_CHOICES, "llm returned zero choices", started)

    message = getattr(choices[0], "message", None)
    response_content = getattr(message, "content", None)
    if not response_content:
        return _inconclusive(
            content, InconclusiveReason.EMPTY_CONTENT, "llm returned choice without content", started
        )

    try:
        result = parse_response_content(response_content)
    except ResponseParseError as exc:
        return _inconclusive(
            content,
            InconclusiveReason.INVALID_RESPONSE,
            f"failed to parse llm response {response_content!r}: {exc}",
            started,
        )

    verdict = Verdict.VIOLATES if result.violates_rules else Verdict.DOES_NOT_VIOLATE
    elapsed = time.perf_counter() - started
    logger.debug("[CLASSIFIER] Verdict %s in %.2fs", verdict, elapsed)
    return ClassificationOutcome(verdict=verdict, elapsed_seconds=elapsed)


async def evaluate_message(model: ModelHandle, content: str) -> bool:
    """Return True only when the model positively answered that ``content`` violates the rules."""
    outcome = await classify(model, content)
    return outcome.violates_rules
