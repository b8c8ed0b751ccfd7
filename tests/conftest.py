import pytest

from tallyaudit import config


@pytest.fixture(autouse=True)
def reset_config():
    """Reset environment-driven config between every test."""
    config.reload()
    yield
    config.reload()
