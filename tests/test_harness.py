"""Tests for the offline evaluation harness."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from jobwatch.configuration.app_configuration import ConfigurationError
from jobwatch.evaluation import harness
from jobwatch.evaluation.harness import (
    EvaluationCase,
    EvaluationSummary,
    format_summary,
    load_cases,
    parse_cases,
    run_evaluation,
)


class TestCases:
    def test_packaged_cases_load(self):
        cases = load_cases()
        assert cases
        assert any(c.expected_result for c in cases)
        assert any(not c.expected_result for c in cases)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "cases.json"
        path.write_text(json.dumps([{"content": "hi", "expected_result": False}]), encoding="utf-8")
        assert load_cases(path) == [EvaluationCase("hi", False)]

    @pytest.mark.parametrize("raw", [
        "not json",
        '{"content": "x", "expected_result": true}',
        '[{"content": "x"}]',
        '[{"content": 1, "expected_result": true}]',
        '[{"content": "x", "expected_result": "true"}]',
    ])
    def test_malformed_cases_rejected(self, raw):
        with pytest.raises(ConfigurationError):
            parse_cases(raw)


class TestRunEvaluation:
    @pytest.mark.asyncio
    async def test_all_correct_passes(self):
        cases = [EvaluationCase("hiring", True), EvaluationCase("photos", False)]

        async def oracle(model, content):
            return content == "hiring"

        summary = await run_evaluation(object(), cases, evaluator=oracle)

        assert summary.passed
        assert summary.mispredictions == 0
        assert summary.accuracy == 1.0
        assert summary.average_seconds >= 0
        assert "results: 2/2" in format_summary(summary)

    @pytest.mark.asyncio
    async def test_misprediction_fails(self):
        cases = [EvaluationCase("hiring", True), EvaluationCase("photos", False)]
        summary = await run_evaluation(object(), cases, evaluator=AsyncMock(return_value=False))

        assert not summary.passed
        assert summary.mispredictions == 1
        assert summary.accuracy == 0.5
        output = format_summary(summary)
        assert "case failed with expected result true" in output
        assert "hiring" in output
        assert "results: 1/2" in output

    def test_empty_summary(self):
        summary = EvaluationSummary()
        assert summary.passed
        assert summary.accuracy == 0.0
        assert summary.average_seconds == 0.0


class TestMain:
    def test_exit_code_reflects_mispredictions(self, tmp_path, monkeypatch, fake_model, completion_factory):
        path = tmp_path / "cases.json"
        path.write_text(json.dumps([{"content": "We're hiring!", "expected_result": True}]), encoding="utf-8")
        fake_model.client.chat.completions.create.return_value = completion_factory('{"violates_rules": true}')
        monkeypatch.setattr(harness, "load_model", lambda *args, **kwargs: fake_model)
        monkeypatch.setattr(harness, "load_dotenv", lambda *args, **kwargs: None)

        assert harness.main([str(path)]) == 0

        fake_model.client.chat.completions.create.return_value = completion_factory('{"violates_rules": false}')
        assert harness.main([str(path)]) == 1

    def test_missing_credential_exits_with_error(self, tmp_path, monkeypatch):
        def no_key(*args, **kwargs):
            raise ConfigurationError("'OPENAI_API_KEY' environment variable not set")

        monkeypatch.setattr(harness, "load_model", no_key)
        monkeypatch.setattr(harness, "load_dotenv", lambda *args, **kwargs: None)

        with patch.object(harness.logger, "critical") as mock_critical:
            assert harness.main([]) == 2
        mock_critical.assert_called_once()
