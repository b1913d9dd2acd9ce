"""Shared fixtures."""

import pytest

from security_agent.config import DEFAULT_RULES_CONFIG, AnalyzerConfig


@pytest.fixture
def rules_config():
    return DEFAULT_RULES_CONFIG


@pytest.fixture
def batching_config():
    return AnalyzerConfig(enable_batching=True, batch_size=2, max_batch_tokens=60000)


@pytest.fixture
def unbatched_config():
    return AnalyzerConfig(enable_batching=False)
