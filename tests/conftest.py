import pytest

from config.settings import Settings


@pytest.fixture
def settings() -> Settings:
    """Defaults only; ignores any local .env file."""
    return Settings(_env_file=None)
