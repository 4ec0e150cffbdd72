"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings
from src.generation.errors import TransportError


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeTransport:
    """
    Scripted stand-in for a Gemini transport.

    Each call to generate() pops the next item: strings are returned as the
    response body, exceptions are raised.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict] = []
        self.closed = False

    async def generate(self, system_instruction, prompt, generation_config):
        self.calls.append(
            {
                "system_instruction": system_instruction,
                "prompt": prompt,
                "generation_config": generation_config,
            }
        )
        if not self.responses:
            raise TransportError("no scripted response left")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True


def puzzle_payload(**overrides) -> str:
    data = {
        "question": "Type the sequence you saw",
        "answer": "1, 2, 3",
        "sequence": [1, 2, 3],
        "explanation": "Plain forward recall.",
        "hints": ["Starts at one", "Counts up"],
    }
    data.update(overrides)
    return json.dumps(data)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings():
    """Settings with fast timings and no .env lookup."""
    return Settings(
        _env_file=None,
        gemini_api_key="test-key",
        retry_delay_seconds=0.0,
        max_fetch_attempts=5,
        success_delay_seconds=0.1,
        vibration_seconds=0.01,
    )


@pytest.fixture
def sample_puzzle_json():
    """Provide a well-formed generation response body."""
    return puzzle_payload()


@pytest.fixture
def fake_transport_factory():
    return FakeTransport


@pytest.fixture
def make_puzzle_payload():
    return puzzle_payload
