import pytest

from user_service.core.logging.builder import setup_logging


@pytest.fixture(autouse=True)
def restore_session_logging(test_settings):
    """Tests here install their own logging config; put the session one back afterwards."""
    yield
    setup_logging(test_settings)
