"""Shared fixtures for all tests."""
import pytest

from chipledger.managers.session_manager import session_manager


@pytest.fixture(autouse=True)
def _clear_sessions():
    """Start every test with an empty global session store."""
    session_manager._sessions.clear()
    yield
    session_manager._sessions.clear()
