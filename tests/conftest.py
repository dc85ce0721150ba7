"""
Pytest Configuration and Fixtures
"""

import json
from typing import Any

import pytest

from provider_events import SHEETS_TO_SLACK
from workflow_ai.generator.model_registry import ModelRegistry

TEST_API_KEY = "sk-ant-test"


@pytest.fixture
def registry() -> ModelRegistry:
    """Returns a registry with a test API key."""
    return ModelRegistry(api_key=TEST_API_KEY)


@pytest.fixture
def sheets_to_slack() -> dict[str, Any]:
    """Returns a three node workflow document as the model would write it."""
    return json.loads(json.dumps(SHEETS_TO_SLACK))
