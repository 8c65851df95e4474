"""
Thin wrapper around an OpenAI-compatible chat completion endpoint.

The handle returned by :func:`load_model` is shared read-only by every event
handler. Any server speaking the OpenAI chat API works (vLLM, LM Studio,
Ollama, OpenAI itself); ``base_url`` selects which one.
"""

from __future__ import annotations

import asyncio
import itertools
import os
from dataclasses import dataclass, field
from typing import Any, Dict

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion
from openai.types.shared_params.response_format_json_schema import ResponseFormatJSONSchema

from jobwatch.configuration.app_configuration import ConfigurationError
from jobwatch.datatypes.moderation_datatypes import ClassificationRequest
from jobwatch.util.logger import get_logger

logger = get_logger("model_client")


class InferenceQueue:
    """
    Single-flight queue in front of a backend that cannot serve concurrent requests.

    Requests are registered in an in-flight table keyed by request id and a
    single worker coroutine executes them one at a time, in arrival order.
    The worker is started lazily on first use and restarted if it dies.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[int] = asyncio.Queue()
        self._in_flight: Dict[int, tuple[Any, asyncio.Future]] = {}
        self._ids = itertools.count(1)
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        """Number of requests queued or running."""
        return len(self._in_flight)

    async def submit(self, call) -> Any:
        """Run the zero-argument coroutine factory ``call`` once it reaches the head of the queue."""
        loop = asyncio.get_running_loop()
        request_id = next(self._ids)
        future: asyncio.Future = loop.create_future()
        self._in_flight[request_id] = (call, future)
        await self._queue.put(request_id)

        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="jobwatch-inference-queue")

        try:
            return await future
        finally:
            # Drop the entry even if the caller was cancelled while waiting
            self._in_flight.pop(request_id, None)

    async def shutdown(self) -> None:
        """Stop the worker and cancel every request still waiting for it."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            await asyncio.gather(self._worker, return_exceptions=True)
        self._worker = None

        for _, future in list(self._in_flight.values()):
            if not future.done():
                future.cancel()
        if self._in_flight:
            logger.info("[INFERENCE QUEUE] Cancelled %d pending request(s) on shutdown", len(self._in_flight))

    async def _run(self) -> None:
        while True:
            request_id = await self._queue.get()
            entry = self._in_flight.get(request_id)
            if entry is None:
                logger.debug("[INFERENCE QUEUE] Request %d abandoned before start", request_id)
                continue

            call, future = entry
            if future.done():
                continue

            logger.debug("[INFERENCE QUEUE] Running request %d (%d pending)", request_id, self.pending)
            try:
                result = await call()
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as exc:
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(result)


@dataclass(slots=True)
class ModelHandle:
    """Loaded model: an API client plus the identifier of the checkpoint to query."""

    client: AsyncOpenAI
    model_id: str
    request_timeout: float | None = None
    queue: InferenceQueue | None = field(default=None)

    async def close(self) -> None:
        if self.queue is not None:
            await self.queue.shutdown()
        await self.client.close()


def load_model(
    model_id: str,
    credential_source: str,
    *,
    base_url: str | None = None,
    request_timeout: float | None = None,
    serialize_requests: bool = False,
) -> ModelHandle:
    """
    Create a :class:`ModelHandle` for ``model_id``.

    Args:
        model_id: Model name understood by the inference server.
        credential_source: Name of the environment variable holding the API key.
        base_url: Optional OpenAI-compatible endpoint. Defaults to OpenAI's.
        request_timeout: Optional per-request bound in seconds.
        serialize_requests: Route every request through an :class:`InferenceQueue`.

    Raises:
        ConfigurationError: If the credential variable is unset or empty.
    """
    api_key = os.getenv(credential_source)
    if not api_key:
        raise ConfigurationError(f"'{credential_source}' environment variable not set")

    client = AsyncOpenAI(api_key=api_key, base_url=base_url)
    logger.info(
        "[MODEL CLIENT] Loaded model=%s base_url=%s serialize=%s",
        model_id,
        base_url or "default",
        serialize_requests,
    )
    return ModelHandle(
        client=client,
        model_id=model_id,
        request_timeout=request_timeout,
        queue=InferenceQueue() if serialize_requests else None,
    )


def build_response_format(schema: Dict[str, Any]) -> ResponseFormatJSONSchema:
    """Wrap a JSON schema in the strict structured-output response format."""
    return ResponseFormatJSONSchema(
        type="json_schema",
        json_schema={
            "name": "moderation_verdict",
            "strict": True,
            "schema": schema,
        },
    )


async def send_chat_request(model: ModelHandle, request: ClassificationRequest) -> ChatCompletion:
    """
    Send ``request`` to the model and return the raw completion.

    Raises whatever the client raises; ``asyncio.TimeoutError`` when
    ``model.request_timeout`` elapses first.
    """

    async def _call() -> ChatCompletion:
        return await model.client.chat.completions.create(
            model=model.model_id,
            messages=[
                {"role": "system", "content": request.system_instructions},
                {"role": "user", "content": request.user_content},
            ],
            temperature=request.sampling_temperature,
            max_tokens=request.max_output_tokens,
            response_format=build_response_format(request.response_schema),
        )

    async def _bounded() -> ChatCompletion:
        if model.request_timeout is None:
            return await _call()
        return await asyncio.wait_for(_call(), timeout=model.request_timeout)

    if model.queue is not None:
        return await model.queue.submit(_bounded)
    return await _bounded()
