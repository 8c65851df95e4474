"""Tests for the model client and the single-flight inference queue."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from jobwatch.ai.classifier import build_request
from jobwatch.ai.model_client import (
    InferenceQueue,
    ModelHandle,
    build_response_format,
    load_model,
    send_chat_request,
)
from jobwatch.configuration.app_configuration import ConfigurationError


class TestLoadModel:
    def test_missing_credential_is_fatal(self, monkeypatch):
        monkeypatch.delenv("JOBWATCH_TEST_KEY", raising=False)
        with pytest.raises(ConfigurationError):
            load_model("some-model", "JOBWATCH_TEST_KEY")

    def test_builds_client_from_environment(self, monkeypatch):
        monkeypatch.setenv("JOBWATCH_TEST_KEY", "sk-test")
        with patch("jobwatch.ai.model_client.AsyncOpenAI") as mock_client:
            handle = load_model(
                "some-model",
                "JOBWATCH_TEST_KEY",
                base_url="http://localhost:8000/v1",
                request_timeout=5.0,
            )

        mock_client.assert_called_once_with(api_key="sk-test", base_url="http://localhost:8000/v1")
        assert handle.model_id == "some-model"
        assert handle.request_timeout == 5.0
        assert handle.queue is None

    def test_serialized_handle_gets_queue(self, monkeypatch):
        monkeypatch.setenv("JOBWATCH_TEST_KEY", "sk-test")
        with patch("jobwatch.ai.model_client.AsyncOpenAI"):
            handle = load_model("m", "JOBWATCH_TEST_KEY", serialize_requests=True)
        assert isinstance(handle.queue, InferenceQueue)


def test_build_response_format_is_strict():
    fmt = build_response_format({"type": "object"})
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["name"] == "moderation_verdict"
    assert fmt["json_schema"]["strict"] is True


class TestInferenceQueue:
    @pytest.mark.asyncio
    async def test_runs_one_request_at_a_time(self):
        queue = InferenceQueue()
        running = 0
        peak = 0
        order = []

        def make_call(i):
            async def call():
                nonlocal running, peak
                running += 1
                peak = max(peak, running)
                await asyncio.sleep(0.01)
                order.append(i)
                running -= 1
                return i * 10
            return call

        results = await asyncio.gather(*(queue.submit(make_call(i)) for i in range(5)))

        assert results == [0, 10, 20, 30, 40]
        assert peak == 1
        assert order == [0, 1, 2, 3, 4]
        assert queue.pending == 0
        await queue.shutdown()

    @pytest.mark.asyncio
    async def test_exception_reaches_caller_and_queue_keeps_running(self):
        queue = InferenceQueue()

        async def boom():
            raise RuntimeError("backend down")

        async def ok():
            return "ok"

        with pytest.raises(RuntimeError):
            await queue.submit(boom)
        assert await queue.submit(ok) == "ok"
        await queue.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_cancels_waiting_requests(self):
        queue = InferenceQueue()
        started = asyncio.Event()

        async def blocking():
            started.set()
            await asyncio.sleep(10)

        async def never_runs():
            return "unreachable"

        running = asyncio.create_task(queue.submit(blocking))
        waiting = asyncio.create_task(queue.submit(never_runs))
        await started.wait()

        await queue.shutdown()

        results = await asyncio.wait_for(asyncio.gather(running, waiting, return_exceptions=True), timeout=1)
        assert all(isinstance(r, asyncio.CancelledError) for r in results)
        assert queue.pending == 0


class TestSendChatRequest:
    @pytest.mark.asyncio
    async def test_serialized_send_goes_through_queue(self, fake_model, completion_factory):
        fake_model.queue = InferenceQueue()
        fake_model.client.chat.completions.create.return_value = completion_factory('{"violates_rules": true}')

        response = await send_chat_request(fake_model, build_request("hi"))

        assert response.choices[0].message.content == '{"violates_rules": true}'
        await fake_model.close()
        fake_model.client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_raises(self, fake_model):
        async def slow(**kwargs):
            await asyncio.sleep(1)

        fake_model.client.chat.completions.create = AsyncMock(side_effect=slow)
        fake_model.request_timeout = 0.01

        with pytest.raises(asyncio.TimeoutError):
            await send_chat_request(fake_model, build_request("hi"))
