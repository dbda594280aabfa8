"""Shared pytest fixtures for scanner tests."""

from collections.abc import Iterator

import pytest

from nftscan.core.config import Settings


@pytest.fixture
def mock_settings() -> Settings:
    """Create Settings instance with test values.

    Returns:
        Settings instance configured for testing
    """
    return Settings(
        rpc_url="http://localhost:8545",
        contract_address="0x1234567890123456789012345678901234567890",
        log_level="INFO",
    )


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test.

    This ensures tests don't interfere with each other via cached settings.
    """
    import nftscan.core.config

    nftscan.core.config._settings = None

    yield

    nftscan.core.config._settings = None
