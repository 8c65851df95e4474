"""
Offline evaluation of the classifier against a labelled message set.

Run before deploying a prompt or schema change::

    jobwatch-eval                      # packaged data/messages.json
    jobwatch-eval path/to/cases.json

Each record is ``{"content": str, "expected_result": bool}``. The run passes
only when every case is predicted correctly; average latency is printed but
not asserted.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from jobwatch.ai.classifier import evaluate_message
from jobwatch.ai.model_client import ModelHandle, load_model
from jobwatch.configuration.app_configuration import BASE_DIR, ConfigurationError, load_app_config
from jobwatch.util.logger import get_logger

logger = get_logger("evaluation")


@dataclass(frozen=True, slots=True)
class EvaluationCase:
    content: str
    expected_result: bool


@dataclass(slots=True)
class CaseResult:
    case: EvaluationCase
    predicted: bool
    elapsed_seconds: float

    @property
    def passed(self) -> bool:
        return self.predicted == self.case.expected_result


@dataclass(slots=True)
class EvaluationSummary:
    results: List[CaseResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def mispredictions(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def passed(self) -> bool:
        return self.mispredictions == 0

    @property
    def accuracy(self) -> float:
        if not self.results:
            return 0.0
        return (self.total - self.mispredictions) / self.total

    @property
    def average_seconds(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.elapsed_seconds for r in self.results) / self.total


def parse_cases(raw: str) -> List[EvaluationCase]:
    """Parse a JSON array of ``{content, expected_result}`` records.

    Raises:
        ConfigurationError: If the data is not a list of well-formed records.
    """
    try:
        records = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"evaluation data is not valid JSON: {exc}") from exc

    if not isinstance(records, list):
        raise ConfigurationError("evaluation data must be a JSON array")

    cases: List[EvaluationCase] = []
    for index, record in enumerate(records):
        if (
            not isinstance(record, dict)
            or not isinstance(record.get("content"), str)
            or not isinstance(record.get("expected_result"), bool)
        ):
            raise ConfigurationError(f"evaluation record {index} must have string 'content' and bool 'expected_result'")
        cases.append(EvaluationCase(content=record["content"], expected_result=record["expected_result"]))
    return cases


def load_cases(path: Path | None = None) -> List[EvaluationCase]:
    """Load cases from ``path`` or, when omitted, from the packaged data set."""
    if path is None:
        raw = resources.files("jobwatch.data").joinpath("messages.json").read_text(encoding="utf-8")
    else:
        raw = path.read_text(encoding="utf-8")
    return parse_cases(raw)


async def run_evaluation(model: ModelHandle, cases: List[EvaluationCase], evaluator=evaluate_message) -> EvaluationSummary:
    """Evaluate every case sequentially so latencies are not skewed by contention."""
    summary = EvaluationSummary()
    for case in cases:
        started = time.perf_counter()
        predicted = await evaluator(model, case.content)
        result = CaseResult(case=case, predicted=predicted, elapsed_seconds=time.perf_counter() - started)
        summary.results.append(result)
        logger.info(
            "[EVALUATION] %s expected=%s predicted=%s (%.2fs) %r",
            "PASS" if result.passed else "FAIL",
            case.expected_result,
            predicted,
            result.elapsed_seconds,
            case.content[:80],
        )
    return summary


def format_summary(summary: EvaluationSummary) -> str:
    lines: List[str] = []
    for result in summary.results:
        if result.passed:
            continue
        lines.append("---")
        lines.append(f"case failed with expected result {str(result.case.expected_result).lower()}")
        lines.append(result.case.content)
        lines.append("---")
    lines.append(f"average time: {summary.average_seconds:.2f}s")
    lines.append(f"accuracy: {summary.accuracy:.1%}")
    lines.append(f"results: {summary.total - summary.mispredictions}/{summary.total}")
    return "\n".join(lines)


async def async_main(cases_path: Path | None) -> int:
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    try:
        ai_settings = load_app_config().ai_settings
        cases = load_cases(cases_path)
        model = load_model(
            ai_settings.model_id,
            ai_settings.api_key_env,
            base_url=ai_settings.base_url,
            request_timeout=ai_settings.request_timeout_seconds,
            serialize_requests=ai_settings.serialize_requests,
        )
    except (ConfigurationError, OSError) as exc:
        logger.critical("[EVALUATION] Cannot start: %s", exc)
        return 2

    try:
        summary = await run_evaluation(model, cases)
    finally:
        await model.close()

    print(format_summary(summary))
    return 0 if summary.passed else 1


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="jobwatch-eval", description="Evaluate the classifier on labelled messages")
    parser.add_argument("cases", nargs="?", type=Path, help="JSON file of {content, expected_result} records")
    args = parser.parse_args(argv)
    return asyncio.run(async_main(args.cases))


if __name__ == "__main__":
    sys.exit(main())
