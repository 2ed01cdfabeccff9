"""
Global pytest configuration.

Loaded automatically by pytest; provides shared fixtures and markers.
Django settings come from pyproject.toml (src.config.settings_test).
"""

from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def project_root():
    """Root directory of the repository."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_container():
    """
    Drop the global DI container between tests.

    Every test gets a fresh event publisher and fresh repositories.
    """
    from src.config.container import reset_container as _reset

    _reset()
    yield
    _reset()


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: end-to-end tests through the HTTP API"
    )
