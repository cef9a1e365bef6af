"""
Pytest Configuration and Shared Fixtures.

Provides common test fixtures for framework unit tests.
"""

import pytest


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def mock_env_vars(monkeypatch, tmp_path):
    """Set up mock environment variables for testing."""
    env_vars = {
        "EVAL_DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}",
        "EVAL_LOG_LEVEL": "DEBUG",
        "EVAL_STANDARD_DAILY_HOURS": "8",
        "EVAL_PAYOUT_ROUNDING_UNIT": "10",
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop cached settings, engine and session factory around each test."""
    import core.database.engine as engine_module
    import core.database.session as session_module
    from modules.evaluation.core.config import get_evaluation_settings
    from modules.evaluation.dependencies import reset_container

    get_evaluation_settings.cache_clear()
    reset_container()
    yield
    get_evaluation_settings.cache_clear()
    reset_container()
    session_module._session_factory = None
    if engine_module._engine is not None:
        engine_module._engine.dispose()
        engine_module._engine = None
