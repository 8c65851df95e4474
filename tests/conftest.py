"""
Pytest configuration and fixtures for jobwatch tests.
"""

import os
import sys
import tempfile
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Keep test log files out of the working tree; must be set before jobwatch imports
os.environ.setdefault("JOBWATCH_LOG_DIR", tempfile.mkdtemp(prefix="jobwatch-logs-"))

# Add src directory to path so imports work without installing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from jobwatch.ai.model_client import ModelHandle  # noqa: E402


def make_completion(*contents):
    """Build an object shaped like an OpenAI ChatCompletion with one choice per content."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=c)) for c in contents]
    )


@pytest.fixture
def completion_factory():
    return make_completion


@pytest.fixture
def fake_model():
    """ModelHandle whose client.chat.completions.create is an AsyncMock."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=make_completion('{"violates_rules": false}'))
    client.close = AsyncMock()
    return ModelHandle(client=client, model_id="test-model")
